"""Radar (polar) chart of monthly incident counts.

Twelve month axes start at 12 o'clock and run clockwise. Each selected
series (GLOBAL allowed) is a closed polygon with a hoverable marker on every
non-zero month. The whole chart body sits in a group translated by the pan
offset and scaled by the zoom factor, so dragging and zooming never change
the geometry computed here.

Value labels are drawn only for pinned series: each starts 18 px outward
from its vertex, then all labels of the frame go through the collision
resolver together.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from incident_charts.data.aggregation import MONTH_NAMES, Bucket, GroupBy, aggregate
from incident_charts.data.records import IncidentRecord
from incident_charts.data.window import DateWindow
from incident_charts.interaction.collision import resolve_label_collisions

from .layout import NO_DATA_MESSAGE, SELECT_PROMPT, Margin, placeholder
from .palette import ChartPalette, default_palette
from .registry import register_chart_type
from .scales import ScaleSpec, radial_scale
from .shapes import Circle, Group, HoverTarget, Line, Path, Text
from .surfaces import RenderSurface
from .types import ChartConfig, ChartRequest, ChartResult, InteractionState, SelectionMode

__all__ = [
    "CHART_TYPE",
    "MARGIN",
    "LABEL_OFFSET",
    "RadarScales",
    "month_angles",
    "vertex_positions",
    "label_positions",
    "compute_scales",
    "render",
    "select_buckets",
]

log = logging.getLogger(__name__)

MARGIN = Margin(top=70, right=70, bottom=70, left=70)
LABEL_OFFSET = 18.0
MONTH_LABEL_GAP = 15.0
VERTEX_RADIUS = 4
EMPTY_DOMAIN_MAX = 10


@dataclass(frozen=True)
class RadarScales:
    r: ScaleSpec
    radius: float
    width: float
    height: float
    window: DateWindow


def month_angles() -> np.ndarray:
    """Clockwise angles from 12 o'clock for the 12 month axes."""
    return np.arange(12) * (2 * np.pi / 12)


def vertex_positions(values, r_scale: ScaleSpec) -> np.ndarray:
    """(12, 2) array of vertex coordinates relative to the chart center."""
    angles = month_angles()
    radii = np.array([r_scale(v) for v in values], dtype=float)
    return np.column_stack((radii * np.sin(angles), -radii * np.cos(angles)))


def label_positions(values, r_scale: ScaleSpec, offset: float = LABEL_OFFSET) -> List[Tuple[int, float, float]]:
    """(month, x, y) initial label anchors for the non-zero months."""
    angles = month_angles()
    vertices = vertex_positions(values, r_scale)
    out = []
    for month, value in enumerate(values):
        if value > 0:
            x, y = vertices[month]
            out.append(
                (month, float(x + offset * np.sin(angles[month])), float(y - offset * np.cos(angles[month])))
            )
    return out


def compute_scales(
    buckets: Mapping[str, Bucket], window: DateWindow, width: float = 600, height: float = 600
) -> RadarScales:
    plot_width, plot_height = MARGIN.inner(width, height)
    radius = min(plot_width, plot_height) / 2
    peak = max((max(b.per_month) for b in buckets.values()), default=0)
    if peak <= 0:
        peak = EMPTY_DOMAIN_MAX
    # the domain runs out to the last grid ring, so the outer ring is the edge
    return RadarScales(r=radial_scale(peak, radius), radius=radius, width=width, height=height, window=window)


def render(
    surface: RenderSurface,
    buckets: Mapping[str, Bucket],
    scales: RadarScales,
    selection: SelectionMode,
    state: InteractionState = InteractionState(),
    palette: ChartPalette = default_palette,
) -> str:
    surface.clear()
    surface.add(
        Text(
            scales.width / 2,
            30,
            f"Seasonal Patterns: Monthly Attack Distribution ({scales.window.start}-{scales.window.end})",
            anchor="middle",
            size=20,
            weight="bold",
            role="title",
        )
    )
    container = surface.add(Group(translate=(scales.width / 2, scales.height / 2), role="radar-container"))
    body = container.add(Group(translate=state.pan, scale=state.zoom, role="radar-group"))
    _draw_grid(body, scales, palette)

    if not buckets:
        log.debug("radar: nothing selected")
        placeholder(body, 0.0, 0.0, SELECT_PROMPT + " data")
        return "empty"
    if all(b.total == 0 for b in buckets.values()):
        log.debug("radar: no incidents for %s in %s-%s", list(buckets), scales.window.start, scales.window.end)
        placeholder(body, 0.0, 0.0, NO_DATA_MESSAGE)
        return "empty"

    labels: List[Tuple[float, float, int, str]] = []
    keys = list(buckets)
    for i, key in enumerate(keys):
        values = buckets[key].per_month
        color = palette.color_for_radar(i)
        vertices = vertex_positions(values, scales.r)
        body.add(
            Path(
                [tuple(p) for p in vertices.tolist()],
                closed=True,
                fill=color,
                stroke=color,
                stroke_width=2,
                opacity=0.5,
                role="radar-path",
            )
        )
        for month, value in enumerate(values):
            if value <= 0:
                continue
            x, y = vertices[month]
            body.add(
                Circle(
                    float(x),
                    float(y),
                    VERTEX_RADIUS,
                    fill=color,
                    stroke="#ffffff",
                    role="radar-point",
                    hover=HoverTarget("radar_point", key, {"month": month, "value": value}),
                )
            )
        if key in state.pinned:
            for month, lx, ly in label_positions(values, scales.r):
                labels.append((lx, ly, values[month], color))

    resolved = resolve_label_collisions([(x, y) for x, y, _v, _c in labels])
    for (x, y), (_x0, _y0, value, color) in zip(resolved, labels):
        body.add(Text(x, y, str(value), anchor="middle", size=11, weight="bold", color=color, role="value-label"))

    _draw_legend(surface, keys, scales, state, palette)
    return "ok"


def _draw_grid(body: Group, scales: RadarScales, palette: ChartPalette) -> None:
    radius = scales.radius
    for ring in scales.r.tick_values:
        r = scales.r(ring)
        body.add(Circle(0.0, 0.0, r, stroke="#cccccc", role="grid-ring"))
        body.add(Text(5, -r, str(ring), size=10, color="#666666", role="ring-label"))
    for i, angle in enumerate(month_angles()):
        sx, sy = float(np.sin(angle)), float(-np.cos(angle))
        body.add(Line(0.0, 0.0, radius * sx, radius * sy, stroke="#cccccc", role="axis"))
        lx = (radius + MONTH_LABEL_GAP) * sx
        ly = (radius + MONTH_LABEL_GAP) * sy
        if i in (0, 6):
            anchor = "middle"
        elif i < 6:
            anchor, lx = "start", lx + 5
        else:
            anchor, lx = "end", lx - 5
        baseline = {0: "bottom", 6: "top"}.get(i, "middle")
        body.add(Text(lx, ly, MONTH_NAMES[i], anchor=anchor, baseline=baseline, size=12, weight="bold", role="month-label"))


def _draw_legend(
    surface: RenderSurface, keys: List[str], scales: RadarScales, state: InteractionState, palette: ChartPalette
) -> None:
    legend = surface.add(Group(translate=(0.0, scales.height - 30), role="legend"))
    legend.add(Text(scales.width / 2, -18, "Legend (Click to show values)", anchor="middle", weight="bold", role="legend-title"))
    item_width = scales.width / max(len(keys), 1)
    for i, key in enumerate(keys):
        cx = item_width * (i + 0.5)
        pinned = key in state.pinned
        target = HoverTarget("legend", key, {"pinned": pinned})
        legend.add(Circle(cx - 40, 0.0, 6, fill=palette.color_for_radar(i), role="legend-dot", hover=target))
        legend.add(
            Text(
                cx - 30,
                0.0,
                key,
                weight="bold" if pinned else "normal",
                role="legend-label",
                hover=target,
            )
        )


# ---------------- Registry builder ----------------------------------------

CHART_TYPE = "radar.monthly"


def select_buckets(records: Sequence[IncidentRecord], config: ChartConfig) -> Dict[str, Bucket]:
    """Selected keys in selection order; keys without data become empty series."""
    all_buckets = aggregate(records, config.date_window, GroupBy.CATEGORY, include_global=True)
    return {key: all_buckets.get(key) or Bucket(key) for key in config.selection_mode.keys}


def _build(req: ChartRequest, surface: RenderSurface) -> ChartResult:
    buckets = select_buckets(req.records, req.config)
    scales = compute_scales(buckets, req.config.date_window, surface.width, surface.height)
    status = render(surface, buckets, scales, req.config.selection_mode, req.effective_state())
    return ChartResult(surface, {"status": status, "series_count": len(buckets), "r_max": scales.r.upper})


register_chart_type(CHART_TYPE, _build, "Monthly seasonal radar per selected location")
