"""Donut breakdowns (two variants sharing one layout).

``location``: slices per category after majority-share grouping, colored
with category10, three-column legend, center text naming the largest real
category. ``fatality``: the three fatality classes with fixed colors, center
text with the fatal percentage.

Slices follow the bucket order (no re-sorting), starting at 12 o'clock and
running clockwise. The ring's inner radius is 0.6 of the outer radius.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from incident_charts.data.aggregation import GLOBAL_KEY, OTHERS_KEY, Bucket, GroupBy, aggregate, majority_share
from incident_charts.data.records import IncidentRecord

from .layout import NO_DATA_MESSAGE, placeholder, truncate_label
from .palette import ChartPalette, default_palette
from .registry import register_chart_type
from .shapes import Group, HoverTarget, Rect, Text, Wedge
from .surfaces import RenderSurface
from .types import ChartConfig, ChartRequest, ChartResult, InteractionState, SelectionMode

__all__ = [
    "LOCATION_CHART_TYPE",
    "FATALITY_CHART_TYPE",
    "LOCATION",
    "FATALITY",
    "INNER_RATIO",
    "DonutScales",
    "pie_angles",
    "legend_name",
    "compute_scales",
    "render",
    "select_buckets",
]

log = logging.getLogger(__name__)

LOCATION = "location"
FATALITY = "fatality"
INNER_RATIO = 0.6
OUTER_RATIO = 0.9
LEGEND_PER_ROW = 3
LEGEND_ROW_HEIGHT = 15
TITLES = {
    LOCATION: "Attacks by Location (Top Contributors)",
    FATALITY: "Attacks by Fatality",
}


@dataclass(frozen=True)
class DonutScales:
    variant: str
    width: float
    height: float
    cx: float
    cy: float
    outer_radius: float
    inner_radius: float
    total: int


def compute_scales(
    buckets: Mapping[str, Bucket], width: float = 400, height: float = 230, variant: str = LOCATION
) -> DonutScales:
    if variant not in TITLES:
        raise ValueError(f"Unknown donut variant: {variant}")
    if variant == LOCATION:
        radius = min(width - 200, height - 50) / 2
    else:
        radius = min(width, height - 60) / 2
    outer = max(radius, 0.0) * OUTER_RATIO
    return DonutScales(
        variant=variant,
        width=width,
        height=height,
        cx=width / 2,
        cy=height / 2 - 15,
        outer_radius=outer,
        inner_radius=outer * INNER_RATIO,
        total=sum(b.total for k, b in buckets.items() if k != GLOBAL_KEY),
    )


def pie_angles(values: List[int]) -> List[Tuple[float, float]]:
    """Clockwise (start, end) angles in radians; empty when the sum is 0."""
    total = sum(values)
    if total <= 0:
        return []
    out = []
    acc = 0
    for v in values:
        start = acc / total * 2 * math.pi
        acc += v
        out.append((start, acc / total * 2 * math.pi))
    return out


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100.0:.1f}"


def render(
    surface: RenderSurface,
    buckets: Mapping[str, Bucket],
    scales: DonutScales,
    selection: Optional[SelectionMode] = None,
    state: InteractionState = InteractionState(),
    palette: ChartPalette = default_palette,
) -> str:
    surface.clear()
    surface.add(
        Text(scales.width / 2, 12, TITLES[scales.variant], anchor="middle", size=17, weight="bold", role="title")
    )
    chart = surface.add(Group(translate=(scales.cx, scales.cy), role="donut"))
    slices = [(k, b) for k, b in buckets.items() if k != GLOBAL_KEY]
    if scales.total <= 0:
        log.debug("donut(%s): no data", scales.variant)
        placeholder(chart, 0.0, 0.0, NO_DATA_MESSAGE)
        return "empty"

    colors = _slice_colors(slices, scales.variant, palette)
    for (key, bucket), (start, end), color in zip(slices, pie_angles([b.total for _k, b in slices]), colors):
        if bucket.total == 0:
            continue
        chart.add(
            Wedge(
                0.0,
                0.0,
                scales.inner_radius,
                scales.outer_radius,
                start,
                end,
                fill=color,
                role="slice",
                hover=HoverTarget("slice", key, {"label": key, "value": bucket.total, "total": scales.total}),
            )
        )

    if scales.variant == LOCATION:
        _location_center(chart, slices, scales.total)
        _location_legend(surface, slices, colors, scales)
    else:
        _fatality_center(chart, buckets, scales.total)
        _fatality_legend(surface, scales, palette)
    return "ok"


def _slice_colors(slices, variant: str, palette: ChartPalette) -> List[str]:
    if variant == FATALITY:
        return [palette.fatality(k) for k, _b in slices]
    return [palette.color_for_slice(i) for i in range(len(slices))]


def _center_lines(chart: Group, lines: List[Tuple[str, float]]) -> None:
    for text, dy in lines:
        chart.add(Text(0.0, dy * 17, text, anchor="middle", size=17, weight="bold", role="center-text"))


def _location_center(chart: Group, slices, total: int) -> None:
    real = [(k, b) for k, b in slices if k != OTHERS_KEY]
    if not real:
        return
    key, bucket = max(real, key=lambda kb: kb[1].total)
    _center_lines(chart, [("Most in", -1.0), (key, 0.5), (f"{_percent(bucket.total, total)}%", 2.0)])


def _fatality_center(chart: Group, buckets: Mapping[str, Bucket], total: int) -> None:
    fatal = buckets["FATAL"].total if "FATAL" in buckets else 0
    _center_lines(chart, [(f"{_percent(fatal, total)}%", -0.8), ("FATAL", 0.5), ("Attacks", 1.8)])


def legend_name(key: str) -> str:
    if key == OTHERS_KEY:
        return "OTHERS (<5%)"
    return truncate_label(key, 15, 13)


def _location_legend(surface: RenderSurface, slices, colors: List[str], scales: DonutScales) -> None:
    item_width = (scales.width - 40) // LEGEND_PER_ROW
    legend = surface.add(Group(translate=(scales.width / 2 - 160, scales.height - 40), role="legend"))
    for i, ((key, _b), color) in enumerate(zip(slices, colors)):
        x = (i % LEGEND_PER_ROW) * item_width
        y = (i // LEGEND_PER_ROW) * LEGEND_ROW_HEIGHT
        legend.add(Rect(x, y, 10, 10, fill=color, role="legend-swatch"))
        legend.add(Text(x + 15, y + 9, legend_name(key), baseline="bottom", size=12, role="legend-label"))


def _fatality_legend(surface: RenderSurface, scales: DonutScales, palette: ChartPalette) -> None:
    legend = surface.add(Group(translate=(scales.width / 2 - 35, scales.height - 45), role="legend"))
    for i, key in enumerate(("FATAL", "NON-FATAL", "UNKNOWN")):
        y = i * LEGEND_ROW_HEIGHT
        legend.add(Rect(0, y, 10, 10, fill=palette.fatality(key), role="legend-swatch"))
        legend.add(Text(15, y + 9, key, baseline="bottom", size=12, role="legend-label"))


# ---------------- Registry builders ---------------------------------------

LOCATION_CHART_TYPE = "donut.location"
FATALITY_CHART_TYPE = "donut.fatality"


def select_buckets(records: Sequence[IncidentRecord], config: ChartConfig, variant: str) -> Dict[str, Bucket]:
    if variant == FATALITY:
        return aggregate(records, config.date_window, GroupBy.FATALITY)
    return majority_share(aggregate(records, config.date_window, GroupBy.CATEGORY))


def _builder(variant: str):
    def _build(req: ChartRequest, surface: RenderSurface) -> ChartResult:
        buckets = select_buckets(req.records, req.config, variant)
        scales = compute_scales(buckets, surface.width, surface.height, variant)
        status = render(surface, buckets, scales, req.config.selection_mode, req.effective_state())
        return ChartResult(surface, {"status": status, "bucket_count": len(buckets), "total": scales.total})

    return _build


register_chart_type(LOCATION_CHART_TYPE, _builder(LOCATION), "Donut of locations (majority share)")
register_chart_type(FATALITY_CHART_TYPE, _builder(FATALITY), "Donut of fatality classes")
