"""Charting layer: scales, shape trees, surfaces and the chart renderers.

Renderers are pure functions of (buckets, scales, selection, state) that
describe a frame as shapes on a ``RenderSurface``. The registry wraps each
renderer with its aggregation step so views only pass records and a config.

Importing this package registers the built-in chart types.
"""

from .registry import chart_registry, register_chart_type, render_chart  # noqa: F401
from .surfaces import MatplotlibSurface, RecordingSurface, RenderSurface  # noqa: F401
from .types import (  # noqa: F401
    ChartConfig,
    ChartRequest,
    ChartResult,
    InteractionState,
    SelectionMode,
    SelectionModeError,
)
from . import bar_chart  # noqa: F401  # registers bar.fatality_stack
from . import donut_chart  # noqa: F401  # registers donut.location / donut.fatality
from . import timeseries_chart  # noqa: F401  # registers line.yearly
from . import radar_chart  # noqa: F401  # registers radar.monthly
