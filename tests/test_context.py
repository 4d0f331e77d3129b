"""Dashboard bootstrap and shared services."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from incident_charts.app.context import create_dashboard, load_dashboard
from incident_charts.data.records import RecordLoadError
from incident_charts.services.event_bus import ChartEvent


@pytest.fixture
def ctx(records):
    context = create_dashboard(records)
    yield context
    context.close()


def test_views_share_services(ctx):
    assert set(ctx.views) == {"country_bar", "global_summary", "monthly_radar"}
    for view in ctx.views.values():
        assert view.bus is ctx.bus
        assert view.tooltip is ctx.tooltip
        assert view.store is ctx.store
    assert ctx.duration_s >= 0.0


def test_render_all(ctx):
    results = ctx.render_all()
    assert set(results["global_summary"]) == {"location", "fatality", "timeseries"}
    assert results["monthly_radar"]["radar"].meta["status"] == "empty"
    assert all(r.meta["build_ms"] >= 0.0 for view in results.values() for r in view.values())


def test_bootstrap_logged_to_buffer(ctx):
    messages = [e.message for e in ctx.log_buffer.filter(level="INFO")]
    assert any(m.startswith("Dashboard ready: 32 records, 3 views") for m in messages)


def test_single_tooltip_across_views(ctx):
    ctx.render_all()
    bar = ctx.country_bar
    bar.apply_date_window(2000, 2010)
    bar.set_through_year(2010)
    plot = bar.surfaces["bar"].groups("plot")[0]
    group = [c for c in plot.children if getattr(c, "role", "") == "bar-group"][0]
    overlay = group.children[0]
    x = 180 + overlay.width / 2
    y = 20 + group.translate[1] + overlay.height / 2
    bar.controllers["bar"].pointer_move(x, y)
    assert ctx.tooltip.state.owner == "country_bar.bar"
    assert ctx.tooltip.created_count == 1
    # switching away from the bar view hides its tooltip
    ctx.switch_view("monthly_radar")
    assert not ctx.tooltip.state.visible


def test_switch_view_discards_drag(ctx):
    radar = ctx.monthly_radar
    radar.toggle_category("USA")
    radar.controller.pointer_down(300, 300)
    radar.controller.pointer_move(320, 320)
    assert ctx.switch_view("monthly_radar") is radar
    assert radar.pan_zoom.dragging
    ctx.switch_view("global_summary")
    assert not radar.pan_zoom.dragging
    assert radar.config.pan == (0.0, 0.0)


def test_events_reach_embedding_code(ctx):
    seen = []
    ctx.bus.subscribe(ChartEvent.SELECTION_CHANGED, lambda evt: seen.append(evt.payload["view"]))
    ctx.global_summary.toggle_category("USA")
    ctx.monthly_radar.toggle_category("USA")
    assert seen == ["global_summary", "monthly_radar"]


def test_close_detaches_log_buffer(records):
    context = create_dashboard(records)
    context.close()
    assert not context.log_buffer.attached


def test_without_log_capture(records):
    context = create_dashboard(records, capture_logs=False)
    assert context.log_buffer is None
    context.close()


def test_load_dashboard_with_session_dir(tmp_path: Path):
    dataset = tmp_path / "attacks.json"
    rows = [
        {"Date": "2001-03-04", "Country": "USA", "Fatal": True},
        {"Date": "2002-07-01", "Country": "AUSTRALIA", "Fatal": False},
        {"Date": "not a date", "Country": "USA", "Fatal": None},
    ]
    dataset.write_text(json.dumps(rows), encoding="utf-8")
    session_dir = tmp_path / "session"
    first = load_dashboard(dataset, session_dir=session_dir)
    first.monthly_radar.toggle_category("USA")
    first.close()
    second = load_dashboard(dataset, session_dir=session_dir)
    assert len(second.records) == 3
    assert second.monthly_radar.config.selection_mode.keys == ("USA",)
    second.close()


def test_load_dashboard_bad_dataset(tmp_path: Path):
    dataset = tmp_path / "broken.json"
    dataset.write_text("{}", encoding="utf-8")
    with pytest.raises(RecordLoadError):
        load_dashboard(dataset)


def test_context_manager_detaches_log_buffer(records):
    with create_dashboard(records) as context:
        assert context.log_buffer.attached
    assert not context.log_buffer.attached
