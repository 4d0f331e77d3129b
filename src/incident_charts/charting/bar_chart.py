"""Stacked horizontal bars: fatality breakdown per category.

One band per bucket in the given order. Segments are drawn left to right as
unknown, non-fatal, fatal; zero-width segments are omitted. An invisible
overlay over the whole bar carries the hover target so the tooltip appears
wherever the pointer enters the bar.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Mapping, Sequence

from incident_charts.data.aggregation import Bucket, GroupBy, aggregate, top_n
from incident_charts.data.records import IncidentRecord

from .layout import NO_DATA_MESSAGE, SELECT_PROMPT, Margin, placeholder, wrap_label
from .palette import ChartPalette, default_palette
from .registry import register_chart_type
from .scales import BandScale, ScaleSpec, linear_count_scale
from .shapes import Group, HoverTarget, Line, Rect, Text
from .surfaces import RenderSurface
from .types import ChartConfig, ChartRequest, ChartResult, InteractionState, SelectionMode

__all__ = ["CHART_TYPE", "MARGIN", "BarScales", "compute_scales", "render", "select_buckets"]

log = logging.getLogger(__name__)

MARGIN = Margin(top=20, right=180, bottom=50, left=180)
LEGEND_SWATCH = 18
LEGEND_SPACING = 25
SEGMENTS = (
    ("unknown", "unknown_count", "bar-unknown"),
    ("non_fatal", "non_fatal_count", "bar-non-fatal"),
    ("fatal", "fatal_count", "bar-fatal"),
)


@dataclass(frozen=True)
class BarScales:
    x: ScaleSpec
    y: BandScale
    plot_width: float
    plot_height: float


def compute_scales(buckets: Mapping[str, Bucket], width: float = 800, height: float = 500) -> BarScales:
    plot_width, plot_height = MARGIN.inner(width, height)
    max_total = max((b.total for b in buckets.values()), default=0)
    return BarScales(
        x=linear_count_scale(max_total, (0.0, plot_width)),
        y=BandScale(tuple(buckets), (0.0, plot_height)),
        plot_width=plot_width,
        plot_height=plot_height,
    )


def render(
    surface: RenderSurface,
    buckets: Mapping[str, Bucket],
    scales: BarScales,
    selection: SelectionMode,
    state: InteractionState = InteractionState(),
    palette: ChartPalette = default_palette,
) -> str:
    """Draw the chart; returns 'ok' or 'empty'."""
    surface.clear()
    plot = surface.add(Group(translate=(MARGIN.left, MARGIN.top), role="plot"))
    _draw_x_axis(plot, scales, palette)
    _draw_legend(plot, scales.plot_width + 20, 20, palette)

    if selection.is_custom and not selection.keys:
        log.debug("bar chart: custom mode without selection")
        placeholder(plot, scales.plot_width / 2, scales.plot_height / 2, SELECT_PROMPT)
        return "empty"
    if not buckets:
        log.debug("bar chart: no buckets in window")
        placeholder(plot, scales.plot_width / 2, scales.plot_height / 2, NO_DATA_MESSAGE)
        return "empty"

    band = scales.y.bandwidth
    for key, bucket in buckets.items():
        y0 = scales.y(key)
        bar = plot.add(Group(translate=(0.0, y0), role="bar-group"))
        # invisible overlay first so segments paint above it
        bar.add(
            Rect(
                0.0,
                0.0,
                scales.x(bucket.total),
                band,
                fill="none",
                opacity=0.0,
                role="bar-overlay",
                hover=HoverTarget("bar", key, {"bucket": bucket, "colors": _segment_colors(palette)}),
            )
        )
        offset = 0
        for cls, attr, role in SEGMENTS:
            count = getattr(bucket, attr)
            if count > 0:
                bar.add(
                    Rect(scales.x(offset), 0.0, scales.x(count), band, fill=palette.fatality(cls), role=role)
                )
            offset += count
        plot.add(
            Text(scales.x(bucket.total) + 5, y0 + band / 2, str(bucket.total), size=14, role="bar-total")
        )
        for i, line in enumerate(wrap_label(key, MARGIN.left - 10)):
            plot.add(
                Text(
                    -10,
                    y0 + band / 2 + i * 14 * 1.1,
                    line,
                    anchor="end",
                    size=14,
                    weight="bold",
                    role="y-label",
                )
            )
    return "ok"


def _segment_colors(palette: ChartPalette) -> dict:
    return {cls: palette.fatality(cls) for cls, _attr, _role in SEGMENTS}


def _draw_x_axis(plot: Group, scales: BarScales, palette: ChartPalette) -> None:
    h = scales.plot_height
    for tick in scales.x.tick_values:
        px = scales.x(tick)
        plot.add(Line(px, 0.0, px, h, stroke=palette.role("grid.line"), role="grid"))
        plot.add(Text(px, h + 6, f"{tick:g}", anchor="end", baseline="top", size=14, role="x-tick"))
    plot.add(Line(0.0, h, scales.plot_width, h, stroke=palette.role("axis.line"), role="axis"))
    plot.add(
        Text(
            scales.plot_width / 2,
            h + MARGIN.bottom - 10,
            "Number of Shark Attacks",
            anchor="middle",
            size=16,
            role="x-label",
        )
    )


def _draw_legend(plot: Group, x: float, y: float, palette: ChartPalette) -> None:
    plot.add(Text(x, y - 10, "Fatality Status", weight="bold", role="legend-title"))
    for i, (cls, label) in enumerate((("fatal", "FATAL"), ("non_fatal", "NON-FATAL"), ("unknown", "UNKNOWN"))):
        top = y + i * LEGEND_SPACING
        plot.add(Rect(x, top, LEGEND_SWATCH, LEGEND_SWATCH, fill=palette.fatality(cls), role="legend-swatch"))
        plot.add(Text(x + 25, top + LEGEND_SWATCH / 2, label, role="legend-label"))


# ---------------- Registry builder ----------------------------------------

CHART_TYPE = "bar.fatality_stack"


def select_buckets(records: Sequence[IncidentRecord], config: ChartConfig) -> Dict[str, Bucket]:
    """Category buckets ordered by total; top-N or the custom keys."""
    all_buckets = aggregate(records, config.date_window, GroupBy.CATEGORY, through_year=config.through_year)
    mode = config.selection_mode
    if mode.is_custom:
        ranked = top_n(all_buckets, len(all_buckets))
        return {k: b for k, b in ranked.items() if k in mode.keys}
    return top_n(all_buckets, mode.size)


def _build(req: ChartRequest, surface: RenderSurface) -> ChartResult:
    buckets = select_buckets(req.records, req.config)
    scales = compute_scales(buckets, surface.width, surface.height)
    status = render(surface, buckets, scales, req.config.selection_mode, req.effective_state())
    return ChartResult(surface, {"status": status, "bucket_count": len(buckets), "x_max": scales.x.upper})


register_chart_type(CHART_TYPE, _build, "Stacked fatality bars per location")
