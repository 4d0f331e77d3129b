"""Application layer: view configs, session persistence, views and bootstrap.

The Qt host (``incident_charts.app.qt_host``) is not imported here; it needs
the optional ``qt`` extra.
"""

from .session import SessionStore  # noqa: F401
from .config_store import (  # noqa: F401
    CONFIG_VERSION,
    COUNTRY_BAR,
    GLOBAL_SUMMARY,
    MONTHLY_RADAR,
    VIEW_DEFAULTS,
    default_view_config,
    load_view_config,
    save_view_config,
)
from .selection import SelectorItem, prune_selection, selector_candidates  # noqa: F401
from .views import ChartView, CountryBarView, GlobalSummaryView, MonthlyRadarView  # noqa: F401
from .context import DashboardContext, create_dashboard, load_dashboard  # noqa: F401

__all__ = [
    "SessionStore",
    # Config store
    "CONFIG_VERSION",
    "COUNTRY_BAR",
    "GLOBAL_SUMMARY",
    "MONTHLY_RADAR",
    "VIEW_DEFAULTS",
    "default_view_config",
    "load_view_config",
    "save_view_config",
    # Selection
    "SelectorItem",
    "prune_selection",
    "selector_candidates",
    # Views
    "ChartView",
    "CountryBarView",
    "GlobalSummaryView",
    "MonthlyRadarView",
    "DashboardContext",
    "create_dashboard",
    "load_dashboard",
]
