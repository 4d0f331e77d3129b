"""Render surfaces: where a chart's shape tree ends up.

``RecordingSurface`` keeps the shapes in memory (tests, embedding in other
toolkits). ``MatplotlibSurface`` additionally draws every shape onto a
matplotlib ``Figure`` whose single axes use pixel coordinates with the y
axis pointing down, shows the shared tooltip as an annotation, and forwards
matplotlib pointer events to an interaction controller.

Both satisfy ``RenderSurface``. Every render starts with ``clear()``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib import patches
from matplotlib.transforms import Affine2D, Transform

from incident_charts.interaction.tooltip import TooltipState

from .shapes import Circle, Group, Line, Path, Rect, Text, Wedge, find_hover, iter_shapes

__all__ = ["RenderSurface", "RecordingSurface", "MatplotlibSurface", "shapes_summary"]

log = logging.getLogger(__name__)

_H_ALIGN = {"start": "left", "middle": "center", "end": "right"}
_V_ALIGN = {"top": "top", "middle": "center", "bottom": "bottom"}


class RenderSurface(Protocol):  # pragma: no cover - structural only
    width: float
    height: float

    def clear(self) -> None: ...

    def add(self, shape: Any) -> Any: ...

    @property
    def shapes(self) -> List[Any]: ...

    def hit_test(self, x: float, y: float) -> Optional[Any]: ...

    def sync_tooltip(self, state: TooltipState) -> None: ...

    def flush(self) -> None: ...


class RecordingSurface:
    """Headless surface recording the shape tree of the last render."""

    def __init__(self, width: float = 800, height: float = 500, *, owner: Optional[str] = None) -> None:
        self.width = width
        self.height = height
        self.owner = owner
        self._shapes: List[Any] = []
        self.clear_count = 0
        self.frame_count = 0
        self.tooltip: Optional[TooltipState] = None

    @property
    def shapes(self) -> List[Any]:
        return self._shapes

    def clear(self) -> None:
        self._shapes = []
        self.clear_count += 1

    def add(self, shape: Any) -> Any:
        self._shapes.append(shape)
        return shape

    def hit_test(self, x: float, y: float) -> Optional[Any]:
        return find_hover(self._shapes, x, y)

    def sync_tooltip(self, state: TooltipState) -> None:
        if self.owner is not None and state.owner not in (None, self.owner):
            self.tooltip = None
            return
        self.tooltip = state if state.visible else None

    def flush(self) -> None:
        """Mark the current frame complete."""
        self.frame_count += 1

    # Inspection helpers -----------------------------------------------
    def find(self, role: Optional[str] = None, kind: Optional[type] = None) -> List[Any]:
        out = []
        for shape in iter_shapes(self._shapes):
            if role is not None and getattr(shape, "role", None) != role:
                continue
            if kind is not None and not isinstance(shape, kind):
                continue
            out.append(shape)
        return out

    def texts(self, role: Optional[str] = None) -> List[str]:
        return [t.text for t in self.find(role, Text)]

    def groups(self, role: Optional[str] = None) -> List[Group]:
        return [s for s in self._shapes if isinstance(s, Group) and (role is None or s.role == role)]


class MatplotlibSurface(RecordingSurface):
    """Surface drawing onto a matplotlib figure (Agg canvas by default)."""

    def __init__(
        self,
        width: float = 800,
        height: float = 500,
        *,
        dpi: int = 100,
        owner: Optional[str] = None,
        figure: Optional[Figure] = None,
    ) -> None:
        super().__init__(width, height, owner=owner)
        self.dpi = dpi
        self.figure = figure or Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        if figure is None:
            FigureCanvasAgg(self.figure)
        self.ax = self.figure.add_axes((0, 0, 1, 1))
        self._annotation = None
        self._connections: List[int] = []
        self._setup_axes()

    @property
    def canvas(self):
        return self.figure.canvas

    def _setup_axes(self) -> None:
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)
        self.ax.set_axis_off()
        self._annotation = None

    def clear(self) -> None:
        super().clear()
        self.ax.cla()
        self._setup_axes()

    def add(self, shape: Any) -> Any:
        super().add(shape)
        self._draw(shape, self.ax.transData)
        return shape

    def draw(self) -> None:
        self.canvas.draw()

    def flush(self) -> None:
        super().flush()
        self.canvas.draw_idle()

    # Drawing -------------------------------------------------------------
    def _draw(self, shape: Any, transform: Transform) -> None:
        ax = self.ax
        if isinstance(shape, Group):
            inner = Affine2D().scale(shape.scale).translate(*shape.translate) + transform
            for child in shape.children:
                self._draw(child, inner)
        elif isinstance(shape, Rect):
            ax.add_patch(
                patches.Rectangle(
                    (shape.x, shape.y),
                    shape.width,
                    shape.height,
                    facecolor=_color(shape.fill),
                    edgecolor=_color(shape.stroke),
                    linewidth=shape.stroke_width if shape.stroke else 0,
                    alpha=shape.opacity,
                    transform=transform,
                )
            )
        elif isinstance(shape, Circle):
            ax.add_patch(
                patches.Circle(
                    (shape.cx, shape.cy),
                    shape.r,
                    facecolor=_color(shape.fill),
                    edgecolor=_color(shape.stroke),
                    linewidth=shape.stroke_width if shape.stroke else 0,
                    transform=transform,
                )
            )
        elif isinstance(shape, Line):
            ax.add_line(
                Line2D(
                    [shape.x1, shape.x2],
                    [shape.y1, shape.y2],
                    color=shape.stroke,
                    linewidth=shape.stroke_width,
                    linestyle=(0, shape.dash) if shape.dash else "-",
                    alpha=shape.opacity,
                    transform=transform,
                )
            )
        elif isinstance(shape, Path):
            if not shape.points:
                return
            if shape.closed:
                ax.add_patch(
                    patches.Polygon(
                        list(shape.points),
                        closed=True,
                        facecolor=_color(shape.fill),
                        edgecolor=_color(shape.stroke),
                        linewidth=shape.stroke_width,
                        alpha=shape.opacity,
                        transform=transform,
                    )
                )
            else:
                xs, ys = zip(*shape.points)
                ax.add_line(
                    Line2D(
                        xs,
                        ys,
                        color=_color(shape.stroke) or "none",
                        linewidth=shape.stroke_width,
                        alpha=shape.opacity,
                        transform=transform,
                    )
                )
        elif isinstance(shape, Wedge):
            # clockwise-from-12 angles on y-down axes -> matplotlib degrees
            ax.add_patch(
                patches.Wedge(
                    (shape.cx, shape.cy),
                    shape.outer_radius,
                    math.degrees(shape.start_angle) - 90.0,
                    math.degrees(shape.end_angle) - 90.0,
                    width=shape.outer_radius - shape.inner_radius,
                    facecolor=_color(shape.fill),
                    edgecolor=_color(shape.stroke),
                    linewidth=shape.stroke_width if shape.stroke else 0,
                    transform=transform,
                )
            )
        elif isinstance(shape, Text):
            ax.text(
                shape.x,
                shape.y,
                shape.text,
                ha=_H_ALIGN.get(shape.anchor, "left"),
                va=_V_ALIGN.get(shape.baseline, "center"),
                fontsize=shape.size * 72.0 / self.dpi,
                fontweight=shape.weight,
                color=shape.color,
                rotation=shape.rotation,
                transform=transform,
            )
        else:  # pragma: no cover - unknown shapes are recorded but not drawn
            log.debug("No matplotlib mapping for %s", type(shape).__name__)

    # Tooltip -----------------------------------------------------------
    def sync_tooltip(self, state: TooltipState) -> None:
        super().sync_tooltip(state)
        if self.tooltip is None:
            if self._annotation is not None:
                self._annotation.set_visible(False)
                self.canvas.draw_idle()
            return
        if self._annotation is None:
            self._annotation = self.ax.annotate(
                "",
                xy=(0, 0),
                xycoords="data",
                bbox={"boxstyle": "round", "fc": "w", "alpha": 0.9},
                fontsize=8,
                va="top",
            )
        self._annotation.set_text(state.text)
        self._annotation.xy = (state.x, state.y)
        self._annotation.set_visible(True)
        self.canvas.draw_idle()

    # Events ------------------------------------------------------------
    def event_position(self, event) -> Tuple[float, float]:
        """Surface coordinates of a mouse event, also outside the axes."""
        if event.inaxes is self.ax and event.xdata is not None:
            return float(event.xdata), float(event.ydata)
        x, y = self.ax.transData.inverted().transform((event.x, event.y))
        return float(x), float(y)

    def connect(self, controller: Any) -> List[int]:
        """Forward matplotlib pointer events to ``controller``.

        Presses and hovers count only inside the axes. While a drag is in
        flight, motion anywhere keeps panning and the release always ends
        the drag, wherever the pointer is.
        """

        def _dragging() -> bool:
            pan_zoom = getattr(controller, "pan_zoom", None)
            return pan_zoom is not None and pan_zoom.dragging

        def _move(event) -> None:
            if event.inaxes is self.ax and event.xdata is not None:
                controller.pointer_move(float(event.xdata), float(event.ydata))
            elif _dragging():
                controller.pointer_move(*self.event_position(event))

        def _press(event) -> None:
            if event.inaxes is self.ax and event.xdata is not None:
                controller.pointer_down(float(event.xdata), float(event.ydata))

        def _release(event) -> None:
            controller.pointer_up(*self.event_position(event))

        def _leave(_event) -> None:
            if not _dragging():
                controller.pointer_leave()

        def _scroll(event) -> None:
            if event.inaxes is not self.ax:
                return
            controller.scroll(1 if event.step > 0 else -1)

        self.disconnect()
        self._connections = [
            self.canvas.mpl_connect("motion_notify_event", _move),
            self.canvas.mpl_connect("button_press_event", _press),
            self.canvas.mpl_connect("button_release_event", _release),
            self.canvas.mpl_connect("axes_leave_event", _leave),
            self.canvas.mpl_connect("scroll_event", _scroll),
        ]
        return list(self._connections)

    def disconnect(self) -> None:
        for cid in self._connections:
            self.canvas.mpl_disconnect(cid)
        self._connections = []

    def save(self, path: str, *, format: str = "png", dpi: Optional[int] = None) -> None:
        fmt = format.lower()
        if fmt not in {"png", "svg"}:
            raise ValueError("format must be 'png' or 'svg'")
        self.figure.savefig(path, format=fmt, dpi=(dpi or self.dpi) if fmt == "png" else None)


def _color(value: Optional[str]) -> str:
    return "none" if not value or value == "none" else value


def shapes_summary(shapes: Sequence[Any]) -> Dict[str, int]:
    """Count of leaf shapes per type name (debug logging helper)."""
    counts: Dict[str, int] = {}
    for shape in iter_shapes(shapes):
        name = type(shape).__name__
        counts[name] = counts.get(name, 0) + 1
    return counts
