"""Pointer-driven interaction for one chart surface.

The controller turns pointer events into tooltip updates, hover re-renders,
drag-pan and zoom steps. It never touches aggregated data: everything it
changes is the transient ``InteractionState`` handed to the render callback,
plus the shared ``TooltipContext``.

Design notes:
- Hover targets come from ``surface.hit_test``; the target ``kind`` selects
  the tooltip formatter.
- The time-series plot snaps the pointer to the nearest year of the window
  and re-renders only when that year changes.
- Drag-pan and zoom are delegated to an optional ``PanZoomController``;
  commits go through its hook, the controller only re-renders.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from incident_charts.charting.shapes import HoverTarget
from incident_charts.charting.types import InteractionState

from .pan_zoom import PanZoomController
from .pinning import toggle_pinned
from .tooltip import (
    TooltipContext,
    TooltipLine,
    format_bar_breakdown,
    format_radar_point,
    format_slice,
    format_year_values,
)

__all__ = ["InteractionController", "snap_year"]

log = logging.getLogger(__name__)

RenderCallback = Callable[[InteractionState], Any]


def snap_year(target: HoverTarget, x: float) -> int:
    """Nearest year under surface x for a time-series plot target."""
    origin_x = target.payload.get("origin", (0.0, 0.0))[0]
    year = round(target.payload["x_scale"].invert(x - origin_x))
    return target.payload["window"].clamp_year(int(year))


class InteractionController:
    def __init__(
        self,
        chart_id: str,
        surface: Any,
        tooltip: TooltipContext,
        render: RenderCallback,
        *,
        pan_zoom: Optional[PanZoomController] = None,
        pinned: Sequence[str] = (),
        on_pin_toggle: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.chart_id = chart_id
        self.surface = surface
        self.tooltip = tooltip
        self.pan_zoom = pan_zoom
        self._render = render
        self._pinned = tuple(pinned)
        self._on_pin_toggle = on_pin_toggle
        self._hover_key: Any = None
        self.render_count = 0
        self._unsubscribe = tooltip.subscribe(surface.sync_tooltip)

    @property
    def hover_key(self) -> Any:
        return self._hover_key

    @property
    def state(self) -> InteractionState:
        if self.pan_zoom is not None:
            return InteractionState(
                zoom=self.pan_zoom.zoom, pan=self.pan_zoom.pan, hover_key=self._hover_key, pinned=self._pinned
            )
        return InteractionState(hover_key=self._hover_key, pinned=self._pinned)

    def set_pinned(self, pinned: Sequence[str]) -> None:
        self._pinned = tuple(pinned)

    def render(self) -> Any:
        self.render_count += 1
        result = self._render(self.state)
        # a fresh frame drops any drawn tooltip, redraw it from the shared state
        self.surface.sync_tooltip(self.tooltip.state)
        self.surface.flush()
        return result

    # Pointer events ------------------------------------------------------
    def pointer_move(self, x: float, y: float) -> None:
        if self.pan_zoom is not None and self.pan_zoom.move(x, y):
            self.render()
            return
        shape = self.surface.hit_test(x, y)
        target = shape.hover if shape is not None else None
        if target is None:
            self._clear_hover()
            return
        lines = self._lines_for(target, x)
        if lines:
            self.tooltip.show(self.chart_id, lines, x, y)
        else:
            self.tooltip.hide(self.chart_id)

    def pointer_leave(self) -> None:
        self._clear_hover()

    def pointer_down(self, x: float, y: float) -> Optional[str]:
        """Legend click toggles a pin; anything else on a pannable chart starts a drag."""
        shape = self.surface.hit_test(x, y)
        target = shape.hover if shape is not None else None
        if target is not None and target.kind == "legend":
            self.toggle_pinned(target.key)
            return "pin"
        if self.pan_zoom is not None:
            self.tooltip.hide(self.chart_id)
            self.pan_zoom.begin(x, y)
            return "drag"
        return None

    def pointer_up(self, x: float, y: float) -> bool:
        """End an in-flight drag; True when a pan was committed."""
        if self.pan_zoom is None or not self.pan_zoom.dragging:
            return False
        self.pan_zoom.move(x, y)
        self.pan_zoom.end()
        self.render()
        return True

    def scroll(self, steps: int) -> None:
        if self.pan_zoom is None:
            return
        if self.pan_zoom.zoom_by(steps) is not None:
            self.render()

    # Pinning -------------------------------------------------------------
    def toggle_pinned(self, key: str) -> None:
        if self._on_pin_toggle is not None:
            # the owner updates its config and pushes the new set back
            self._on_pin_toggle(key)
            return
        self._pinned = toggle_pinned(self._pinned, key)
        self.render()

    # Cancellation --------------------------------------------------------
    def discard(self) -> None:
        """Cancel an in-flight drag and hide the tooltip."""
        if self.pan_zoom is not None:
            self.pan_zoom.cancel()
        self._hover_key = None
        self.tooltip.hide(self.chart_id)

    def close(self) -> None:
        self.discard()
        self._unsubscribe()

    # Helpers -------------------------------------------------------------
    def _clear_hover(self) -> None:
        self.tooltip.hide(self.chart_id)
        if self._hover_key is not None:
            self._hover_key = None
            self.render()

    def _lines_for(self, target: HoverTarget, x: float) -> List[TooltipLine]:
        payload = target.payload
        if target.kind == "bar":
            return format_bar_breakdown(payload["bucket"], payload.get("colors"))
        if target.kind == "slice":
            return format_slice(payload["label"], payload["value"], payload["total"])
        if target.kind == "radar_point":
            return format_radar_point(target.key, payload["month"], payload["value"])
        if target.kind == "plot":
            year = snap_year(target, x)
            if year != self._hover_key:
                self._hover_key = year
                self.render()
            return format_year_values(
                year, [(series.key, series.value_at(year), color) for series, color in payload["series"]]
            )
        log.debug("%s: no tooltip for hover kind %s", self.chart_id, target.kind)
        return []
