"""Dashboard bootstrap.

``create_dashboard`` wires the shared services once and hands the same
instances to every view: one session store, one event bus, one tooltip
context and (optionally) a log buffer attached to the package logger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Any, Dict, Optional, Sequence

from incident_charts.charting.surfaces import RecordingSurface
from incident_charts.data.records import IncidentRecord, RecordStore
from incident_charts.interaction.tooltip import TooltipContext
from incident_charts.services.event_bus import EventBus
from incident_charts.services.log_buffer import LogBuffer

from .config_store import KeyValueStore
from .session import SessionStore
from .views import ChartView, CountryBarView, GlobalSummaryView, MonthlyRadarView, SurfaceFactory

__all__ = ["DashboardContext", "create_dashboard", "load_dashboard"]

log = logging.getLogger(__name__)


@dataclass
class DashboardContext:
    """References created during bootstrap.

    Attributes
    ----------
    records: Loaded incident records (never modified).
    store: Session store backing every view config.
    bus: Event bus views publish committed changes on.
    tooltip: The single tooltip shared by every chart.
    log_buffer: Recent log records for a diagnostics panel (None when disabled).
    views: View instances keyed by view id.
    duration_s: Bootstrap time in seconds.
    """

    records: Sequence[IncidentRecord]
    store: KeyValueStore
    bus: EventBus
    tooltip: TooltipContext
    log_buffer: Optional[LogBuffer]
    views: Dict[str, ChartView] = field(default_factory=dict)
    duration_s: float = 0.0

    @property
    def country_bar(self) -> CountryBarView:
        return self.views[CountryBarView.view_id]  # type: ignore[return-value]

    @property
    def global_summary(self) -> GlobalSummaryView:
        return self.views[GlobalSummaryView.view_id]  # type: ignore[return-value]

    @property
    def monthly_radar(self) -> MonthlyRadarView:
        return self.views[MonthlyRadarView.view_id]  # type: ignore[return-value]

    def render_all(self) -> Dict[str, Any]:
        return {view_id: view.render() for view_id, view in self.views.items()}

    def switch_view(self, view_id: str) -> ChartView:
        """Make ``view_id`` current: other views drop drags and tooltips."""
        for other_id, view in self.views.items():
            if other_id != view_id:
                view.discard()
        return self.views[view_id]

    def __enter__(self) -> "DashboardContext":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        for view in self.views.values():
            for controller in view.controllers.values():
                controller.close()
        if self.log_buffer is not None:
            self.log_buffer.detach()


def create_dashboard(
    records: Sequence[IncidentRecord],
    *,
    store: KeyValueStore | None = None,
    surface_factory: SurfaceFactory = RecordingSurface,
    capture_logs: bool = True,
) -> DashboardContext:
    started = time.perf_counter()
    log_buffer = None
    if capture_logs:
        log_buffer = LogBuffer()
        log_buffer.attach()
    ctx = DashboardContext(
        records=records,
        store=store if store is not None else SessionStore(),
        bus=EventBus(),
        tooltip=TooltipContext(),
        log_buffer=log_buffer,
    )
    for view_cls in (CountryBarView, GlobalSummaryView, MonthlyRadarView):
        ctx.views[view_cls.view_id] = view_cls(
            ctx.records, ctx.store, ctx.bus, ctx.tooltip, surface_factory=surface_factory
        )
    ctx.duration_s = time.perf_counter() - started
    log.info("Dashboard ready: %d records, %d views (%.3fs)", len(records), len(ctx.views), ctx.duration_s)
    return ctx


def load_dashboard(
    dataset: str | Path,
    *,
    session_dir: str | Path | None = None,
    surface_factory: SurfaceFactory = RecordingSurface,
) -> DashboardContext:
    """Read the JSON dataset and build a dashboard with an optional file-backed session."""
    records = RecordStore.from_json(dataset)
    store = SessionStore.in_dir(session_dir) if session_dir is not None else SessionStore()
    return create_dashboard(records, store=store, surface_factory=surface_factory)
