"""Headless services shared by the dashboard (event hooks, log buffer)."""

from .event_bus import ChartEvent, Event, EventBus, Subscription  # noqa: F401
from .log_buffer import LogBuffer, LogEntry  # noqa: F401
