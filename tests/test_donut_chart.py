"""Location and fatality donuts."""

from __future__ import annotations

import math

import pytest

from incident_charts.charting import donut_chart
from incident_charts.charting.layout import NO_DATA_MESSAGE
from incident_charts.charting.palette import FATALITY_KEY_COLORS
from incident_charts.charting.registry import render_chart
from incident_charts.charting.surfaces import RecordingSurface
from incident_charts.charting.types import ChartConfig
from incident_charts.data.aggregation import OTHERS_KEY
from incident_charts.data.window import DateWindow
from tests.factories import assert_finite, make_records

WINDOW = DateWindow(2000, 2010)


def _render(records, chart_type, window=WINDOW):
    surface = RecordingSurface(400, 230)
    result = render_chart(surface, chart_type, records, ChartConfig(date_window=window))
    return surface, result


def test_location_slices_follow_majority_share(records):
    surface, result = _render(records, donut_chart.LOCATION_CHART_TYPE)
    assert result.meta["status"] == "ok"
    assert result.meta["total"] == 31
    slices = surface.find("slice")
    assert [s.hover.key for s in slices] == ["USA", "AUSTRALIA", "SOUTH AFRICA", OTHERS_KEY]
    assert [s.hover.payload["value"] for s in slices] == [17, 9, 3, 2]
    assert slices[0].start_angle == 0.0
    assert slices[-1].end_angle == pytest.approx(2 * math.pi)
    for a, b in zip(slices, slices[1:]):
        assert a.end_angle == pytest.approx(b.start_angle)


def test_ring_inner_radius_is_sixty_percent_of_outer(records):
    surface, _ = _render(records, donut_chart.LOCATION_CHART_TYPE)
    wedge = surface.find("slice")[0]
    assert wedge.outer_radius == pytest.approx(81.0)
    assert wedge.inner_radius == pytest.approx(0.6 * wedge.outer_radius)


def test_location_center_names_top_category(records):
    surface, _ = _render(records, donut_chart.LOCATION_CHART_TYPE)
    assert surface.texts("center-text") == ["Most in", "USA", "54.8%"]
    assert "OTHERS (<5%)" in surface.texts("legend-label")


def test_fatality_variant(records):
    surface, result = _render(records, donut_chart.FATALITY_CHART_TYPE)
    assert result.meta["status"] == "ok"
    slices = surface.find("slice")
    assert [s.hover.key for s in slices] == ["FATAL", "NON-FATAL", "UNKNOWN"]
    assert [s.fill for s in slices] == [FATALITY_KEY_COLORS[k] for k in ("FATAL", "NON-FATAL", "UNKNOWN")]
    assert surface.texts("center-text") == ["29.0%", "FATAL", "Attacks"]
    assert surface.texts("legend-label") == ["FATAL", "NON-FATAL", "UNKNOWN"]


def test_zero_slices_are_skipped():
    records = make_records([("A", 2001, 2, 0, 0)])
    surface, _ = _render(records, donut_chart.FATALITY_CHART_TYPE)
    slices = surface.find("slice")
    assert [s.hover.key for s in slices] == ["FATAL"]
    assert slices[0].end_angle == pytest.approx(2 * math.pi)
    assert surface.texts("center-text")[0] == "100.0%"


def test_slice_hit_test_at_centroid(records):
    surface, _ = _render(records, donut_chart.LOCATION_CHART_TYPE)
    donut = surface.groups("donut")[0]
    wedge = surface.find("slice")[1]
    cx, cy = wedge.centroid
    hit = surface.hit_test(donut.translate[0] + cx, donut.translate[1] + cy)
    assert hit is wedge
    assert hit.hover.payload == {"label": "AUSTRALIA", "value": 9, "total": 31}


def test_empty_window_placeholder(records):
    for chart_type in (donut_chart.LOCATION_CHART_TYPE, donut_chart.FATALITY_CHART_TYPE):
        surface, result = _render(records, chart_type, window=DateWindow(1900, 1901))
        assert result.meta["status"] == "empty"
        assert surface.texts("placeholder") == [NO_DATA_MESSAGE]
        assert surface.find("slice") == []
        assert_finite(surface)


def test_unknown_variant_rejected():
    with pytest.raises(ValueError):
        donut_chart.compute_scales({}, 400, 230, "weekday")


def test_pie_angles_empty_total():
    assert donut_chart.pie_angles([0, 0]) == []
    assert donut_chart.legend_name("A VERY LONG LOCATION NAME") == "A VERY LONG L..."
