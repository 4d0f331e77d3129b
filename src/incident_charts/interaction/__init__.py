"""Interaction layer: tooltip context, label collisions, pan/zoom and the
pointer controller shared by all charts."""

from .collision import resolve_label_collisions  # noqa: F401
from .tooltip import TooltipContext, TooltipLine, TooltipState  # noqa: F401
from .pan_zoom import Idle, PanZoomController, Panning, ViewTransform  # noqa: F401
from .pinning import prune_pinned, toggle_pinned  # noqa: F401
from .controller import InteractionController, snap_year  # noqa: F401
