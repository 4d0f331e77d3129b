"""Drag-pan / zoom state machine for the radar chart.

States:
- ``Idle``: nothing in flight; the committed pan is the config's pan.
- ``Panning(buffer)``: a drag is in progress; pointer deltas accumulate in
  the buffer and renders use ``committed + buffer``.

Only the ``Panning -> Idle`` transition of ``end()`` calls the commit hook.
``cancel()`` drops the buffer without committing. Zoom steps and reset
commit immediately, reset as one commit carrying both zoom and pan.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional, Tuple, Union

from incident_charts.charting.types import ZOOM_STEP, clamp_zoom

__all__ = ["Idle", "Panning", "ViewTransform", "PanZoomController"]

log = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    origin: Point
    last: Point
    buffer: Point = (0.0, 0.0)


@dataclass(frozen=True)
class ViewTransform:
    zoom: float = 1.0
    pan: Point = (0.0, 0.0)


CommitHook = Callable[[ViewTransform], None]


class PanZoomController:
    """Holds the committed transform and the in-flight drag state."""

    def __init__(
        self,
        zoom: float = 1.0,
        pan: Point = (0.0, 0.0),
        on_commit: Optional[CommitHook] = None,
    ) -> None:
        self._committed = ViewTransform(clamp_zoom(zoom), (float(pan[0]), float(pan[1])))
        self._state: Union[Idle, Panning] = Idle()
        self._on_commit = on_commit
        self.commit_count = 0

    @property
    def state(self) -> Union[Idle, Panning]:
        return self._state

    @property
    def dragging(self) -> bool:
        return isinstance(self._state, Panning)

    @property
    def committed(self) -> ViewTransform:
        return self._committed

    @property
    def zoom(self) -> float:
        return self._committed.zoom

    @property
    def pan(self) -> Point:
        """Pan to render with: committed pan plus the drag buffer."""
        px, py = self._committed.pan
        if isinstance(self._state, Panning):
            bx, by = self._state.buffer
            return (px + bx, py + by)
        return (px, py)

    def sync(self, zoom: float, pan: Point) -> None:
        """Adopt an externally committed transform (e.g. a reloaded config)."""
        self._state = Idle()
        self._committed = ViewTransform(clamp_zoom(zoom), (float(pan[0]), float(pan[1])))

    # Drag ----------------------------------------------------------------
    def begin(self, x: float, y: float) -> None:
        if self.dragging:
            return
        self._state = Panning(origin=(x, y), last=(x, y))

    def move(self, x: float, y: float) -> bool:
        """Add the pointer delta to the buffer; False when not dragging."""
        if not isinstance(self._state, Panning):
            return False
        lx, ly = self._state.last
        bx, by = self._state.buffer
        self._state = Panning(self._state.origin, (x, y), (bx + x - lx, by + y - ly))
        return True

    def end(self) -> Optional[ViewTransform]:
        """Finish the drag and commit the accumulated pan."""
        if not isinstance(self._state, Panning):
            return None
        pan = self.pan
        self._state = Idle()
        return self._commit(ViewTransform(self._committed.zoom, pan))

    def cancel(self) -> bool:
        if not isinstance(self._state, Panning):
            return False
        log.debug("pan: drag cancelled, buffer %s dropped", self._state.buffer)
        self._state = Idle()
        return True

    # Zoom ----------------------------------------------------------------
    def zoom_by(self, steps: int) -> Optional[ViewTransform]:
        zoom = clamp_zoom(self._committed.zoom + steps * ZOOM_STEP)
        if zoom == self._committed.zoom:
            return None
        return self._commit(ViewTransform(zoom, self._committed.pan))

    def zoom_in(self) -> Optional[ViewTransform]:
        return self.zoom_by(1)

    def zoom_out(self) -> Optional[ViewTransform]:
        return self.zoom_by(-1)

    def reset(self) -> ViewTransform:
        """Back to zoom 1.0 and pan (0, 0) in a single commit."""
        self._state = Idle()
        return self._commit(ViewTransform())

    def _commit(self, transform: ViewTransform) -> ViewTransform:
        self._committed = transform
        self.commit_count += 1
        if self._on_commit is not None:
            self._on_commit(transform)
        return transform
