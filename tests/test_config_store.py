from pathlib import Path

import pytest

from incident_charts.app.config_store import (
    CONFIG_VERSION,
    COUNTRY_BAR,
    GLOBAL_SUMMARY,
    MONTHLY_RADAR,
    default_view_config,
    load_view_config,
    save_view_config,
)
from incident_charts.app.session import SessionStore
from incident_charts.charting.types import ChartConfig, SelectionMode
from incident_charts.data.aggregation import SortOrder
from incident_charts.data.window import DateWindow


def test_load_returns_defaults_when_missing(store):
    cfg = load_view_config(store, COUNTRY_BAR)
    assert cfg == default_view_config(COUNTRY_BAR)
    assert cfg.selection_mode == SelectionMode.top(15)
    assert cfg.through_year == 1900


def test_view_defaults():
    summary = default_view_config(GLOBAL_SUMMARY)
    assert summary.selection_mode.is_custom and summary.selection_mode.limit == 3
    radar = default_view_config(MONTHLY_RADAR)
    assert radar.sort_order is SortOrder.ALPHABETICAL
    assert (radar.zoom, radar.pan, radar.pinned_keys) == (1.0, (0.0, 0.0), ())


def test_unknown_view_raises():
    with pytest.raises(KeyError):
        default_view_config("nope")


def test_save_and_reload_round_trip(tmp_path: Path):
    cfg = ChartConfig(
        date_window=DateWindow(1990, 2005),
        selection_mode=SelectionMode.custom(["USA", "GLOBAL"], limit=3),
        sort_order=SortOrder.ALPHABETICAL,
        zoom=2.2,
        pan=(12.5, -4.0),
        pinned_keys=("USA",),
    )
    save_view_config(SessionStore.in_dir(tmp_path), MONTHLY_RADAR, cfg)
    loaded = load_view_config(SessionStore.in_dir(tmp_path), MONTHLY_RADAR)
    assert loaded == cfg


def test_version_mismatch_resets_to_defaults(store):
    store.set("view_config.monthly_radar", {"version": CONFIG_VERSION + 10, "config": {"zoom": 3.0}})
    assert load_view_config(store, MONTHLY_RADAR) == default_view_config(MONTHLY_RADAR)


def test_non_object_payload_falls_back(store):
    store.set("view_config.country_bar", ["not", "a", "config"])
    assert load_view_config(store, COUNTRY_BAR) == default_view_config(COUNTRY_BAR)


def test_invalid_fields_fall_back_individually(store):
    store.set(
        "view_config.monthly_radar",
        {
            "version": CONFIG_VERSION,
            "config": {
                "zoom": "abc",
                "sort_order": "bogus",
                "selection_mode": {"kind": "top", "size": 7},
                "pan": [3, 4],
                "date_window": {"start": 1850, "end": 2001},
            },
        },
    )
    cfg = load_view_config(store, MONTHLY_RADAR)
    defaults = default_view_config(MONTHLY_RADAR)
    assert cfg.zoom == defaults.zoom
    assert cfg.sort_order is defaults.sort_order
    assert cfg.selection_mode == defaults.selection_mode
    assert cfg.pan == (3.0, 4.0)
    # out of corpus bounds are clamped
    assert cfg.date_window == DateWindow(1900, 2001)


def test_persisted_zoom_is_clamped(store):
    store.set("view_config.monthly_radar", {"version": CONFIG_VERSION, "config": {"zoom": 9}})
    assert load_view_config(store, MONTHLY_RADAR).zoom == 5.0
