"""Synchronous event bus used as the dashboard's callback hooks.

Views publish a ``ChartEvent`` after every committed configuration change so
embedding code can react (persist elsewhere, refresh sibling widgets, log).

Handlers run against a snapshot of the subscriptions taken when ``publish``
starts, so a handler may subscribe or cancel others mid-dispatch. A handler
that raises is recorded in ``errors`` and logged; dispatch carries on with
the next one and the publisher never sees the exception.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import itertools
import logging
from time import perf_counter
from typing import Any, Callable, Deque, List, NamedTuple, Optional

__all__ = [
    "ChartEvent",
    "Event",
    "EventBus",
    "HandlerFailure",
    "Subscription",
]

log = logging.getLogger(__name__)

_ids = itertools.count(1)


class ChartEvent(str, Enum):
    SELECTION_CHANGED = "selection_changed"
    SORT_ORDER_CHANGED = "sort_order_changed"
    DATE_WINDOW_CHANGED = "date_window_changed"
    DATE_WINDOW_REJECTED = "date_window_rejected"
    VIEW_TRANSFORM_COMMITTED = "view_transform_committed"
    PINNED_CHANGED = "pinned_changed"
    THROUGH_YEAR_CHANGED = "through_year_changed"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float

    @property
    def view(self) -> Optional[str]:
        """Name of the publishing view when the payload carries one."""
        if isinstance(self.payload, dict):
            return self.payload.get("view")
        return None


@dataclass
class Subscription:
    event: str
    handler: Callable[[Event], None]
    once: bool = False
    active: bool = True
    id: int = field(default_factory=lambda: next(_ids))

    def cancel(self) -> None:
        self.active = False


class HandlerFailure(NamedTuple):
    event: Event
    error: Exception


def _key(name: str | ChartEvent) -> str:
    return name.value if isinstance(name, ChartEvent) else str(name)


class EventBus:
    """Dispatches chart events to subscribed callables in subscription order."""

    HISTORY_SIZE = 50

    def __init__(self) -> None:
        self._registry: List[Subscription] = []
        self._failures: List[HandlerFailure] = []
        self.history: Deque[Event] = deque(maxlen=self.HISTORY_SIZE)

    def subscribe(self, name: str | ChartEvent, handler: Callable[[Event], None], *, once: bool = False) -> Subscription:
        sub = Subscription(_key(name), handler, once)
        self._registry.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.cancel()
        self._registry = [s for s in self._registry if s.id != sub.id]

    def clear(self) -> None:
        for sub in self._registry:
            sub.cancel()
        self._registry = []
        self._failures = []
        self.history.clear()

    def publish(self, name: str | ChartEvent, payload: Any = None) -> Event:
        event = Event(_key(name), payload, perf_counter())
        self.history.append(event)
        targets = [s for s in self._registry if s.event == event.name]
        for sub in targets:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as exc:  # noqa: BLE001 - one bad hook must not block the others
                self._failures.append(HandlerFailure(event, exc))
                log.warning("Handler for %s (view=%s) failed: %s", event.name, event.view, exc)
                continue
            if sub.once:
                self.unsubscribe(sub)
        return event

    def subscriber_count(self, name: str | ChartEvent) -> int:
        key = _key(name)
        return sum(1 for s in self._registry if s.event == key and s.active)

    def recent(self, *, view: Optional[str] = None) -> List[Event]:
        """Published events, oldest first, optionally limited to one view."""
        return [e for e in self.history if view is None or e.view == view]

    @property
    def errors(self) -> List[HandlerFailure]:
        return list(self._failures)
