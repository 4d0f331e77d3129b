"""Per-view configuration persistence.

Each view stores its ``ChartConfig`` in the session store under
``view_config.<view_id>`` as a versioned payload.

Design principles:
- Explicit schema version; a mismatch resets the view to its defaults.
- Graceful fallback: a missing, corrupt or partially invalid payload never
  raises. Invalid fields fall back one by one (``ChartConfig.from_dict``).
- No Qt and no file handling here; the store decides where data lives.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Protocol

from incident_charts.charting.types import ChartConfig, SelectionMode
from incident_charts.data.aggregation import SortOrder
from incident_charts.data.window import CORPUS_START, DateWindow

__all__ = [
    "CONFIG_VERSION",
    "COUNTRY_BAR",
    "GLOBAL_SUMMARY",
    "MONTHLY_RADAR",
    "VIEW_DEFAULTS",
    "KeyValueStore",
    "default_view_config",
    "load_view_config",
    "save_view_config",
]

log = logging.getLogger(__name__)

CONFIG_VERSION = 1  # Increment when the ChartConfig payload changes shape

COUNTRY_BAR = "country_bar"
GLOBAL_SUMMARY = "global_summary"
MONTHLY_RADAR = "monthly_radar"

VIEW_DEFAULTS: Dict[str, ChartConfig] = {
    COUNTRY_BAR: ChartConfig(
        date_window=DateWindow(),
        selection_mode=SelectionMode.top(15),
        sort_order=SortOrder.BY_COUNT,
        through_year=CORPUS_START,
    ),
    GLOBAL_SUMMARY: ChartConfig(
        date_window=DateWindow(),
        selection_mode=SelectionMode.custom((), limit=3),
        sort_order=SortOrder.BY_COUNT,
    ),
    MONTHLY_RADAR: ChartConfig(
        date_window=DateWindow(),
        selection_mode=SelectionMode.custom((), limit=3),
        sort_order=SortOrder.ALPHABETICAL,
        zoom=1.0,
        pan=(0.0, 0.0),
        pinned_keys=(),
    ),
}


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...  # pragma: no cover - structural

    def set(self, key: str, value: Any) -> None: ...  # pragma: no cover - structural


def _key(view_id: str) -> str:
    return f"view_config.{view_id}"


def default_view_config(view_id: str) -> ChartConfig:
    try:
        return VIEW_DEFAULTS[view_id]
    except KeyError:
        raise KeyError(f"Unknown view: {view_id}") from None


def load_view_config(store: KeyValueStore, view_id: str) -> ChartConfig:
    """Load the committed config for ``view_id`` or its defaults."""
    defaults = default_view_config(view_id)
    raw = store.get(_key(view_id))
    if raw is None:
        return defaults
    if not isinstance(raw, Mapping):
        log.warning("Config for %s is not an object, using defaults", view_id)
        return defaults
    if raw.get("version") != CONFIG_VERSION:
        log.warning("Config for %s has version %r (expected %d), using defaults", view_id, raw.get("version"), CONFIG_VERSION)
        return defaults
    return ChartConfig.from_dict(raw.get("config"), defaults)


def save_view_config(store: KeyValueStore, view_id: str, config: ChartConfig) -> None:
    store.set(_key(view_id), {"version": CONFIG_VERSION, "config": config.to_dict()})
