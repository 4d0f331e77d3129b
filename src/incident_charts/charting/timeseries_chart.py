"""Multi-series yearly line chart.

Every selected key with data in the window becomes a series with one point
per year (missing years count 0), drawn as a monotone curve so lines never
dip below the neighbouring values. The hover cursor is driven by
``InteractionState.hover_key`` holding a year; snapping the pointer to the
nearest year is the controller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from incident_charts.data.aggregation import Bucket, GroupBy, aggregate, select_keys
from incident_charts.data.records import IncidentRecord
from incident_charts.data.window import DateWindow

from .curves import monotone_curve
from .layout import NO_DATA_MESSAGE, SELECT_PROMPT, Margin, placeholder, truncate_label
from .palette import ChartPalette, default_palette
from .registry import register_chart_type
from .scales import ScaleSpec, value_axis_scale, year_scale
from .shapes import Circle, Group, HoverTarget, Line, Path, Rect, Text
from .surfaces import RenderSurface
from .types import ChartConfig, ChartRequest, ChartResult, InteractionState, SelectionMode

__all__ = [
    "CHART_TYPE",
    "MARGIN",
    "Series",
    "TimeSeriesScales",
    "build_series",
    "compute_scales",
    "render",
    "select_buckets",
]

log = logging.getLogger(__name__)

MARGIN = Margin(top=20, right=30, bottom=80, left=60)
LEGEND_ITEM_MAX = 250
CURSOR_RADIUS = 6


@dataclass(frozen=True)
class Series:
    key: str
    years: Tuple[int, ...]
    values: Tuple[int, ...]

    def value_at(self, year: int) -> int:
        if not self.years or year < self.years[0] or year > self.years[-1]:
            return 0
        return self.values[year - self.years[0]]


@dataclass(frozen=True)
class TimeSeriesScales:
    x: ScaleSpec
    y: ScaleSpec
    window: DateWindow
    plot_width: float
    plot_height: float


def build_series(buckets: Mapping[str, Bucket], window: DateWindow) -> List[Series]:
    years = tuple(window.years())
    return [Series(key, years, tuple(b.year_value(y) for y in years)) for key, b in buckets.items()]


def compute_scales(
    buckets: Mapping[str, Bucket], window: DateWindow, width: float = 920, height: float = 480
) -> TimeSeriesScales:
    plot_width, plot_height = MARGIN.inner(width, height)
    series = build_series(buckets, window)
    data_max: Optional[int] = max(max(s.values, default=0) for s in series) if series else None
    return TimeSeriesScales(
        x=year_scale(window, (0.0, plot_width)),
        y=value_axis_scale(data_max, (plot_height, 0.0)),
        window=window,
        plot_width=plot_width,
        plot_height=plot_height,
    )


def render(
    surface: RenderSurface,
    buckets: Mapping[str, Bucket],
    scales: TimeSeriesScales,
    selection: SelectionMode,
    state: InteractionState = InteractionState(),
    palette: ChartPalette = default_palette,
) -> str:
    surface.clear()
    plot = surface.add(Group(translate=(MARGIN.left, MARGIN.top), role="plot"))
    _draw_axes(plot, scales, palette)

    series = build_series(buckets, scales.window)
    if not series:
        message = SELECT_PROMPT if not selection.keys else NO_DATA_MESSAGE
        log.debug("time series: empty (%s)", message)
        placeholder(plot, scales.plot_width / 2, scales.plot_height / 2, message)
        return "empty"

    colors = [palette.color_for_series(i) for i in range(len(series))]
    for s, color in zip(series, colors):
        xs = [scales.x(y) for y in s.years]
        ys = [scales.y(v) for v in s.values]
        plot.add(Path(monotone_curve(xs, ys), stroke=color, stroke_width=3, role="line"))

    plot.add(
        Rect(
            0.0,
            0.0,
            scales.plot_width,
            scales.plot_height,
            opacity=0.0,
            role="hover-area",
            hover=HoverTarget(
                "plot",
                None,
                {
                    "x_scale": scales.x,
                    "window": scales.window,
                    "series": [(s, c) for s, c in zip(series, colors)],
                    "origin": (MARGIN.left, MARGIN.top),
                },
            ),
        )
    )

    year = state.hover_key
    if isinstance(year, int) and scales.window.contains(year):
        cx = scales.x(year)
        plot.add(
            Line(cx, 0.0, cx, scales.plot_height, stroke="#999999", dash=(3, 3), role="hover-line")
        )
        for s, color in zip(series, colors):
            plot.add(
                Circle(
                    cx,
                    scales.y(s.value_at(year)),
                    CURSOR_RADIUS,
                    fill=color,
                    stroke="#ffffff",
                    stroke_width=2,
                    role="hover-point",
                )
            )

    _draw_legend(plot, series, colors, scales, palette)
    return "ok"


def _draw_axes(plot: Group, scales: TimeSeriesScales, palette: ChartPalette) -> None:
    w, h = scales.plot_width, scales.plot_height
    for tick in scales.y.tick_values:
        py = scales.y(tick)
        plot.add(Line(0.0, py, w, py, stroke=palette.role("grid.line"), dash=(3, 3), role="grid"))
        plot.add(Text(-6, py, f"{tick:g}", anchor="end", size=12, role="y-tick"))
    for year in scales.x.tick_values:
        plot.add(Text(scales.x(year), h + 6, str(year), anchor="middle", baseline="top", size=12, role="x-tick"))
    plot.add(Line(0.0, h, w, h, stroke=palette.role("axis.line"), role="axis"))
    plot.add(Line(0.0, 0.0, 0.0, h, stroke=palette.role("axis.line"), role="axis"))
    plot.add(Text(w / 2, h + 40, "Year", anchor="middle", size=14, role="x-label"))
    plot.add(
        Text(-MARGIN.left + 15, h / 2, "Number of Attacks", anchor="middle", size=14, rotation=90, role="y-label")
    )


def _draw_legend(plot: Group, series: List[Series], colors: List[str], scales: TimeSeriesScales, palette) -> None:
    w, h = scales.plot_width, scales.plot_height
    item_width = min(w / len(series), LEGEND_ITEM_MAX)
    start_x = (w - item_width * len(series)) / 2
    plot.add(
        Rect(
            -20,
            h + 50,
            w,
            50,
            fill=palette.role("legend.background"),
            stroke=palette.role("legend.border"),
            role="legend-background",
        )
    )
    for i, (s, color) in enumerate(zip(series, colors)):
        x = start_x + i * item_width
        plot.add(Rect(x, h + 70, 15, 15, fill=color, role="legend-swatch"))
        plot.add(Text(x + 25, h + 82, truncate_label(s.key, 25, 22), baseline="bottom", size=14, role="legend-label"))


# ---------------- Registry builder ----------------------------------------

CHART_TYPE = "line.yearly"


def select_buckets(records: Sequence[IncidentRecord], config: ChartConfig) -> Dict[str, Bucket]:
    all_buckets = aggregate(records, config.date_window, GroupBy.CATEGORY, include_global=True)
    return select_keys(all_buckets, config.selection_mode.keys)


def _build(req: ChartRequest, surface: RenderSurface) -> ChartResult:
    buckets = select_buckets(req.records, req.config)
    scales = compute_scales(buckets, req.config.date_window, surface.width, surface.height)
    status = render(surface, buckets, scales, req.config.selection_mode, req.effective_state())
    return ChartResult(surface, {"status": status, "series_count": len(buckets), "y_max": scales.y.upper})


register_chart_type(CHART_TYPE, _build, "Yearly incident counts per selected location")
