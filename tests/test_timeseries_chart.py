"""Yearly multi-series line chart."""

from __future__ import annotations

from dataclasses import replace

from incident_charts.charting import timeseries_chart
from incident_charts.charting.layout import NO_DATA_MESSAGE, SELECT_PROMPT
from incident_charts.charting.registry import render_chart
from incident_charts.charting.surfaces import RecordingSurface
from incident_charts.charting.types import ChartConfig, InteractionState, SelectionMode
from incident_charts.data.aggregation import GLOBAL_KEY
from incident_charts.data.window import DateWindow
from tests.factories import assert_finite, make_record

WINDOW = DateWindow(2000, 2010)


def _config(keys, window=WINDOW):
    return ChartConfig(date_window=window, selection_mode=SelectionMode.custom(keys, limit=3))


def _render(records, keys, window=WINDOW, state=None):
    surface = RecordingSurface(920, 480)
    result = render_chart(surface, timeseries_chart.CHART_TYPE, records, _config(keys, window), state)
    return surface, result


def test_one_line_per_selected_key(records):
    surface, result = _render(records, ["USA", GLOBAL_KEY])
    assert result.meta["status"] == "ok"
    assert result.meta["series_count"] == 2
    assert len(surface.find("line")) == 2
    assert surface.texts("legend-label") == ["USA", GLOBAL_KEY]


def test_series_fill_missing_years_with_zero(records):
    buckets = timeseries_chart.select_buckets(records, _config(["USA"]))
    (series,) = timeseries_chart.build_series(buckets, WINDOW)
    assert series.years == tuple(range(2000, 2011))
    assert series.values[0] == 8
    assert series.values[1] == 0
    assert series.value_at(2006) == 4
    assert series.value_at(1999) == 0


def test_y_axis_covers_padded_max(records):
    _, result = _render(records, [GLOBAL_KEY])
    # GLOBAL peaks at 8 in 2000: padded floor is 11
    assert result.meta["y_max"] >= 11


def test_keys_without_data_are_dropped(records):
    surface, _ = _render(records, ["USA", "ATLANTIS"])
    assert surface.texts("legend-label") == ["USA"]


def test_hover_year_draws_cursor(records):
    state = InteractionState(hover_key=2005)
    surface, _ = _render(records, ["USA", "AUSTRALIA"], state=state)
    assert len(surface.find("hover-line")) == 1
    points = surface.find("hover-point")
    assert len(points) == 2
    assert points[0].r == 6


def test_hover_outside_window_ignored(records):
    surface, _ = _render(records, ["USA"], state=InteractionState(hover_key=1950))
    assert surface.find("hover-line") == []


def test_hover_area_carries_series_payload(records):
    surface, _ = _render(records, ["USA"])
    (area,) = surface.find("hover-area")
    payload = area.hover.payload
    assert area.hover.kind == "plot"
    assert payload["window"] == WINDOW
    assert payload["origin"] == (timeseries_chart.MARGIN.left, timeseries_chart.MARGIN.top)
    assert [s.key for s, _color in payload["series"]] == ["USA"]


def test_nothing_selected_prompts(records):
    surface, result = _render(records, [])
    assert result.meta["status"] == "empty"
    assert surface.texts("placeholder") == [SELECT_PROMPT]


def test_empty_window_says_no_data(records):
    surface, result = _render(records, ["USA"], window=DateWindow(1900, 1901))
    assert result.meta["status"] == "empty"
    assert surface.texts("placeholder") == [NO_DATA_MESSAGE]
    assert_finite(surface)


def test_single_year_window_has_finite_geometry(records):
    surface, _ = _render(records, ["USA"], window=DateWindow(2005, 2005))
    assert_finite(surface)


def test_long_legend_labels_truncated(records):
    name = "A VERY LONG LOCATION NAME INDEED"
    more = records + [make_record(2002, name)]
    surface, _ = _render(more, [name])
    assert surface.texts("legend-label") == [name[:22] + "..."]


def test_config_unchanged_by_render(records):
    config = _config(["USA"])
    before = replace(config)
    render_chart(RecordingSurface(920, 480), timeseries_chart.CHART_TYPE, records, config)
    assert config == before
