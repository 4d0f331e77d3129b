"""Dashboard views.

A view owns one committed ``ChartConfig``, the surfaces of its charts and one
``InteractionController`` per surface. Every callback follows the same path:
build the next config, persist it, publish a ``ChartEvent`` and re-render.
Callbacks never touch records or buckets directly; the registry rebuilds
them from the config on each render.

Design notes:
- Window, selection and sort changes first call ``controller.discard()`` so
  an in-flight drag or a stale tooltip never survives the new frame.
- Custom selections are pruned to keys with data when the window changes;
  pinned keys are pruned whenever the selection changes.
- Rejected date window input publishes ``DATE_WINDOW_REJECTED`` with the
  user-facing message and leaves the committed window untouched.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from incident_charts.charting import bar_chart, donut_chart, radar_chart, timeseries_chart
from incident_charts.charting.registry import render_chart
from incident_charts.charting.surfaces import RecordingSurface
from incident_charts.charting.types import ChartConfig, ChartResult, InteractionState, SelectionMode
from incident_charts.data.aggregation import SortOrder, Summary, summarize
from incident_charts.data.records import IncidentRecord
from incident_charts.data.window import DateWindowError, parse_date_window
from incident_charts.interaction.controller import InteractionController
from incident_charts.interaction.pan_zoom import PanZoomController, ViewTransform
from incident_charts.interaction.pinning import prune_pinned, toggle_pinned
from incident_charts.interaction.tooltip import TooltipContext
from incident_charts.services.event_bus import ChartEvent, EventBus

from .config_store import COUNTRY_BAR, GLOBAL_SUMMARY, MONTHLY_RADAR, KeyValueStore, load_view_config, save_view_config
from .selection import SelectorItem, prune_selection, selector_candidates

__all__ = [
    "SurfaceFactory",
    "ChartView",
    "CountryBarView",
    "GlobalSummaryView",
    "MonthlyRadarView",
]

log = logging.getLogger(__name__)

SurfaceFactory = Callable[..., Any]


class ChartView:
    """Shared plumbing: config lifecycle, surfaces, controllers, events."""

    view_id: str = ""
    # (chart_id, chart_type, width, height)
    charts: Tuple[Tuple[str, str, float, float], ...] = ()
    include_global = False

    def __init__(
        self,
        records: Sequence[IncidentRecord],
        store: KeyValueStore,
        bus: EventBus,
        tooltip: TooltipContext,
        *,
        surface_factory: SurfaceFactory = RecordingSurface,
    ) -> None:
        self.records = records
        self.store = store
        self.bus = bus
        self.tooltip = tooltip
        self.config: ChartConfig = load_view_config(store, self.view_id)
        self.surfaces: Dict[str, Any] = {}
        self.controllers: Dict[str, InteractionController] = {}
        self.results: Dict[str, ChartResult] = {}
        for chart_id, chart_type, width, height in self.charts:
            surface = surface_factory(width, height, owner=self._owner(chart_id))
            self.surfaces[chart_id] = surface
            self.controllers[chart_id] = self._make_controller(chart_id, chart_type, surface)

    def _owner(self, chart_id: str) -> str:
        return f"{self.view_id}.{chart_id}"

    def _make_controller(self, chart_id: str, chart_type: str, surface: Any) -> InteractionController:
        return InteractionController(
            self._owner(chart_id),
            surface,
            self.tooltip,
            self._renderer(chart_id, chart_type, surface),
            pinned=self.config.pinned_keys,
        )

    def _renderer(self, chart_id: str, chart_type: str, surface: Any) -> Callable[[InteractionState], ChartResult]:
        def _render(state: InteractionState) -> ChartResult:
            result = render_chart(surface, chart_type, self.records, self.config, state)
            self.results[chart_id] = result
            return result

        return _render

    # Rendering -----------------------------------------------------------
    def render(self) -> Dict[str, ChartResult]:
        for controller in self.controllers.values():
            controller.render()
        return dict(self.results)

    def discard(self) -> None:
        for controller in self.controllers.values():
            controller.discard()

    # Commit path ---------------------------------------------------------
    def _commit(self, config: ChartConfig, event: ChartEvent, payload: Dict[str, Any], *, discard: bool = True) -> None:
        if discard:
            self.discard()
        self.config = config
        for controller in self.controllers.values():
            controller.set_pinned(config.pinned_keys)
        save_view_config(self.store, self.view_id, config)
        self.bus.publish(event, {"view": self.view_id, **payload})
        self.render()

    def _with_selection(self, config: ChartConfig, mode: SelectionMode) -> ChartConfig:
        return replace(config, selection_mode=mode, pinned_keys=prune_pinned(config.pinned_keys, mode.keys))

    # Callbacks -----------------------------------------------------------
    def apply_date_window(self, start_text: Any, end_text: Any) -> Optional[str]:
        """Validate and commit a new window; returns the error message on rejection."""
        try:
            window = parse_date_window(start_text, end_text)
        except DateWindowError as exc:
            log.debug("%s: date window rejected: %s", self.view_id, exc)
            self.bus.publish(
                ChartEvent.DATE_WINDOW_REJECTED,
                {"view": self.view_id, "message": str(exc), "input": (start_text, end_text)},
            )
            return str(exc)
        mode = prune_selection(self.config.selection_mode, self.records, window, include_global=self.include_global)
        config = self._with_selection(replace(self.config, date_window=window), mode)
        config = self._adjust_for_window(config)
        self._commit(config, ChartEvent.DATE_WINDOW_CHANGED, {"start": window.start, "end": window.end})
        return None

    def _adjust_for_window(self, config: ChartConfig) -> ChartConfig:
        return config

    def set_selection_mode(self, mode: SelectionMode) -> None:
        self._commit(self._with_selection(self.config, mode), ChartEvent.SELECTION_CHANGED, {"selection": mode.to_dict()})

    def toggle_category(self, key: str) -> bool:
        """Add/remove ``key`` in a custom selection; False when nothing changed."""
        mode = self.config.selection_mode.toggled(key)
        if mode == self.config.selection_mode:
            return False
        self.set_selection_mode(mode)
        return True

    def toggle_sort_order(self) -> SortOrder:
        order = SortOrder.BY_COUNT if self.config.sort_order is SortOrder.ALPHABETICAL else SortOrder.ALPHABETICAL
        self._commit(replace(self.config, sort_order=order), ChartEvent.SORT_ORDER_CHANGED, {"sort_order": order.value})
        return order

    def candidates(self, search: str = "") -> List[SelectorItem]:
        return selector_candidates(
            self.records,
            self.config.date_window,
            self.config.sort_order,
            self.config.selection_mode.keys,
            search,
            include_global=self.include_global,
        )


class CountryBarView(ChartView):
    """Top-N / custom stacked bars with a cumulative 'through year' slider."""

    view_id = COUNTRY_BAR
    charts = (("bar", bar_chart.CHART_TYPE, 800, 500),)

    def _adjust_for_window(self, config: ChartConfig) -> ChartConfig:
        if config.through_year is None or not config.date_window.contains(config.through_year):
            return replace(config, through_year=config.date_window.start)
        return config

    def set_through_year(self, year: int) -> int:
        year = self.config.date_window.clamp_year(int(year))
        if year != self.config.through_year:
            self._commit(
                replace(self.config, through_year=year), ChartEvent.THROUGH_YEAR_CHANGED, {"year": year}, discard=False
            )
        return year

    def step_year(self, delta: int) -> int:
        """Previous/next year, clamped to the window."""
        current = self.config.through_year
        if current is None:
            current = self.config.date_window.start
        return self.set_through_year(current + delta)


class GlobalSummaryView(ChartView):
    """Location and fatality donuts, yearly lines, summary numbers."""

    view_id = GLOBAL_SUMMARY
    charts = (
        ("location", donut_chart.LOCATION_CHART_TYPE, 400, 230),
        ("fatality", donut_chart.FATALITY_CHART_TYPE, 400, 230),
        ("timeseries", timeseries_chart.CHART_TYPE, 920, 480),
    )
    include_global = True

    def summary(self) -> Summary:
        return summarize(self.records, self.config.date_window)


class MonthlyRadarView(ChartView):
    """Seasonal radar with drag-pan, zoom buttons and pinned value labels."""

    view_id = MONTHLY_RADAR
    charts = (("radar", radar_chart.CHART_TYPE, 600, 600),)
    include_global = True

    def _make_controller(self, chart_id: str, chart_type: str, surface: Any) -> InteractionController:
        self.pan_zoom = PanZoomController(self.config.zoom, self.config.pan, on_commit=self._transform_committed)
        return InteractionController(
            self._owner(chart_id),
            surface,
            self.tooltip,
            self._renderer(chart_id, chart_type, surface),
            pan_zoom=self.pan_zoom,
            pinned=self.config.pinned_keys,
            on_pin_toggle=self.toggle_pinned,
        )

    @property
    def controller(self) -> InteractionController:
        return self.controllers["radar"]

    def _transform_committed(self, transform: ViewTransform) -> None:
        self.config = replace(self.config, zoom=transform.zoom, pan=transform.pan)
        save_view_config(self.store, self.view_id, self.config)
        self.bus.publish(
            ChartEvent.VIEW_TRANSFORM_COMMITTED,
            {"view": self.view_id, "zoom": transform.zoom, "pan": transform.pan},
        )

    def zoom_in(self) -> float:
        if self.pan_zoom.zoom_in() is not None:
            self.render()
        return self.config.zoom

    def zoom_out(self) -> float:
        if self.pan_zoom.zoom_out() is not None:
            self.render()
        return self.config.zoom

    def reset_view(self) -> None:
        self.pan_zoom.reset()
        self.render()

    def toggle_pinned(self, key: str) -> None:
        pinned = toggle_pinned(self.config.pinned_keys, key)
        self._commit(replace(self.config, pinned_keys=pinned), ChartEvent.PINNED_CHANGED, {"pinned": list(pinned)}, discard=False)
