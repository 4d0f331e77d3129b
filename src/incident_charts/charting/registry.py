"""Chart registry.

Maps logical chart types to builders. A builder receives a ``ChartRequest``
and the surface to draw on; it aggregates, computes scales, renders, and
returns a ``ChartResult``. Chart modules register their builders at import
time (see ``incident_charts.charting.__init__``).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from time import perf_counter
from typing import Any, Callable, Dict, Optional, Sequence

from .surfaces import RenderSurface, shapes_summary
from .types import ChartConfig, ChartRequest, ChartResult, InteractionState

__all__ = [
    "ChartType",
    "ChartRegistry",
    "chart_registry",
    "register_chart_type",
    "render_chart",
]

log = logging.getLogger(__name__)

Builder = Callable[[ChartRequest, RenderSurface], ChartResult]


@dataclass
class ChartType:
    """Metadata for a registered chart type."""

    chart_type: str
    builder: Builder
    description: str


class ChartRegistry:
    def __init__(self) -> None:
        self._types: Dict[str, ChartType] = {}

    def register(self, chart_type: str, builder: Builder, description: str) -> None:
        if chart_type in self._types:
            raise ValueError(f"Chart type already registered: {chart_type}")
        self._types[chart_type] = ChartType(chart_type, builder, description)

    def build(self, req: ChartRequest, surface: RenderSurface) -> ChartResult:
        """Render the requested chart onto ``surface`` and record build duration (ms)."""
        ct = self._types.get(req.chart_type)
        if ct is None:
            raise KeyError(f"Unknown chart type: {req.chart_type}")
        start = perf_counter()
        result = ct.builder(req, surface)
        elapsed = (perf_counter() - start) * 1000.0
        result.meta.setdefault("build_ms", elapsed)
        result.meta.setdefault("chart_type", req.chart_type)
        log.debug(
            "%s rendered (%s) in %.1f ms: %s",
            req.chart_type,
            result.meta.get("status"),
            elapsed,
            shapes_summary(surface.shapes),
        )
        return result

    def list_types(self) -> Dict[str, str]:
        return {k: v.description for k, v in self._types.items()}

    def __contains__(self, chart_type: object) -> bool:
        return chart_type in self._types


chart_registry = ChartRegistry()


def register_chart_type(chart_type: str, builder: Builder, description: str) -> None:
    chart_registry.register(chart_type, builder, description)


def render_chart(
    surface: RenderSurface,
    chart_type: str,
    records: Sequence[Any],
    config: ChartConfig,
    state: Optional[InteractionState] = None,
) -> ChartResult:
    """Aggregate ``records`` under ``config`` and draw ``chart_type`` on ``surface``."""
    return chart_registry.build(ChartRequest(chart_type, records, config, state), surface)
