"""Shape tree emitted by the chart renderers.

Renderers describe a frame as a flat list of shapes (groups nest). Surfaces
either record them (tests, embedding) or draw them with matplotlib. Hit
testing is pure Python so hover behaviour does not depend on the drawing
backend.

Coordinates are pixels, origin top-left, y growing downwards. Angles of
``Wedge`` are radians measured clockwise from 12 o'clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from matplotlib.path import Path as MplPath
from matplotlib.transforms import Affine2D

__all__ = [
    "HoverTarget",
    "Rect",
    "Circle",
    "Line",
    "Path",
    "Wedge",
    "Text",
    "Group",
    "estimate_text_width",
    "clock_angle",
    "find_hover",
    "iter_shapes",
]

Point = Tuple[float, float]

LINE_HIT_TOLERANCE = 3.0


@dataclass(frozen=True)
class HoverTarget:
    """What the interaction layer needs when the pointer enters a shape.

    ``kind`` selects the tooltip formatter ('bar', 'slice', 'plot',
    'radar_point', 'legend').
    """

    kind: str
    key: Any
    payload: Mapping[str, Any] = field(default_factory=dict)


def estimate_text_width(text: str, size: float = 10.0) -> float:
    return len(text) * size * 0.6


def clock_angle(dx: float, dy: float) -> float:
    """Angle of the vector (dx, dy) clockwise from 12 o'clock in [0, 2*pi)."""
    angle = math.atan2(dx, -dy)
    return angle % (2 * math.pi)


class _Shape:
    hover: Optional[HoverTarget]

    def contains(self, x: float, y: float) -> bool:
        return False


@dataclass
class Rect(_Shape):
    x: float
    y: float
    width: float
    height: float
    fill: str = "none"
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclass
class Circle(_Shape):
    cx: float
    cy: float
    r: float
    fill: str = "none"
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    def contains(self, x: float, y: float) -> bool:
        return math.hypot(x - self.cx, y - self.cy) <= self.r


@dataclass
class Line(_Shape):
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "#000000"
    stroke_width: float = 1.0
    dash: Optional[Tuple[float, float]] = None
    opacity: float = 1.0
    role: str = ""
    hover: Optional[HoverTarget] = None


@dataclass
class Path(_Shape):
    """Polyline, or polygon when ``closed``."""

    points: Sequence[Point]
    closed: bool = False
    fill: str = "none"
    stroke: Optional[str] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    def contains(self, x: float, y: float) -> bool:
        if len(self.points) < 2:
            return False
        if self.closed:
            return MplPath(list(self.points), closed=True).contains_point((x, y))
        for (x1, y1), (x2, y2) in zip(self.points, self.points[1:]):
            if _segment_distance(x, y, x1, y1, x2, y2) <= LINE_HIT_TOLERANCE:
                return True
        return False


@dataclass
class Wedge(_Shape):
    """Ring segment between two clockwise angles."""

    cx: float
    cy: float
    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float
    fill: str = "#cccccc"
    stroke: Optional[str] = "#ffffff"
    stroke_width: float = 2.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    def contains(self, x: float, y: float) -> bool:
        dx, dy = x - self.cx, y - self.cy
        if not self.inner_radius <= math.hypot(dx, dy) <= self.outer_radius:
            return False
        angle = clock_angle(dx, dy)
        return self.start_angle <= angle <= self.end_angle

    @property
    def centroid(self) -> Point:
        mid = (self.start_angle + self.end_angle) / 2.0
        r = (self.inner_radius + self.outer_radius) / 2.0
        return self.cx + r * math.sin(mid), self.cy - r * math.cos(mid)


@dataclass
class Text(_Shape):
    x: float
    y: float
    text: str
    anchor: str = "start"  # start | middle | end
    baseline: str = "middle"  # top | middle | bottom
    size: float = 10.0
    weight: str = "normal"
    color: str = "#333333"
    rotation: float = 0.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    @property
    def width(self) -> float:
        return estimate_text_width(self.text, self.size)

    def contains(self, x: float, y: float) -> bool:
        left = {"start": self.x, "middle": self.x - self.width / 2.0}.get(self.anchor, self.x - self.width)
        top = {"top": self.y, "middle": self.y - self.size / 2.0}.get(self.baseline, self.y - self.size)
        return left <= x <= left + self.width and top <= y <= top + self.size


@dataclass
class Group(_Shape):
    """Children drawn under ``translate(tx, ty) scale(s)``."""

    children: List[Any] = field(default_factory=list)
    translate: Point = (0.0, 0.0)
    scale: float = 1.0
    role: str = ""
    hover: Optional[HoverTarget] = None

    def add(self, shape: Any) -> Any:
        self.children.append(shape)
        return shape

    @property
    def transform(self) -> Affine2D:
        return Affine2D().scale(self.scale).translate(*self.translate)

    def to_local(self, x: float, y: float) -> Point:
        lx, ly = self.transform.inverted().transform((x, y))
        return float(lx), float(ly)

    def contains(self, x: float, y: float) -> bool:
        return find_hover(self.children, *self.to_local(x, y)) is not None


def _segment_distance(px: float, py: float, x1: float, y1: float, x2: float, y2: float) -> float:
    dx, dy = x2 - x1, y2 - y1
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - x1, py - y1)
    t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / length_sq))
    return math.hypot(px - (x1 + t * dx), py - (y1 + t * dy))


def find_hover(shapes: Sequence[Any], x: float, y: float) -> Optional[Any]:
    """Topmost shape carrying a hover target under (x, y)."""
    for shape in reversed(shapes):
        if isinstance(shape, Group):
            hit = find_hover(shape.children, *shape.to_local(x, y))
            if hit is not None:
                return hit
            if shape.hover is None:
                continue
        if shape.hover is not None and shape.contains(x, y):
            return shape
    return None


def iter_shapes(shapes: Sequence[Any]) -> Iterator[Any]:
    """Depth-first walk over leaf shapes (group children included)."""
    for shape in shapes:
        if isinstance(shape, Group):
            yield from iter_shapes(shape.children)
        else:
            yield shape
