"""Shared tooltip context and tooltip content formatters.

One ``TooltipContext`` is created by the dashboard context and handed to
every controller explicitly. The underlying tooltip state is created on
first use, then only updated or hidden; the last hover event wins.

Listeners (surfaces drawing the tooltip) are notified after each change.
Listener failures are logged and never reach the controller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from incident_charts.data.aggregation import MONTH_NAMES, Bucket

__all__ = [
    "TOOLTIP_OFFSET",
    "TooltipLine",
    "TooltipState",
    "TooltipContext",
    "format_bar_breakdown",
    "format_slice",
    "format_year_values",
    "format_radar_point",
]

log = logging.getLogger(__name__)

TOOLTIP_OFFSET = (15.0, -28.0)


class TooltipLine(NamedTuple):
    text: str
    color: Optional[str] = None
    bold: bool = False


@dataclass(frozen=True)
class TooltipState:
    owner: Optional[str] = None
    lines: Tuple[TooltipLine, ...] = ()
    x: float = 0.0
    y: float = 0.0
    visible: bool = False

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


class TooltipContext:
    """The single tooltip shared by all charts of a dashboard."""

    def __init__(self, offset: Tuple[float, float] = TOOLTIP_OFFSET) -> None:
        self._offset = offset
        self._state: Optional[TooltipState] = None
        self._listeners: List[Callable[[TooltipState], None]] = []
        self.created_count = 0

    @property
    def state(self) -> TooltipState:
        return self._state or TooltipState()

    @property
    def created(self) -> bool:
        return self._state is not None

    def subscribe(self, listener: Callable[[TooltipState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def show(self, owner: str, lines: Sequence[TooltipLine], x: float, y: float) -> TooltipState:
        """Show ``lines`` near the pointer position (x, y)."""
        if self._state is None:
            self._state = TooltipState()
            self.created_count += 1
        self._state = TooltipState(
            owner=owner,
            lines=tuple(lines),
            x=x + self._offset[0],
            y=y + self._offset[1],
            visible=True,
        )
        self._notify()
        return self._state

    def hide(self, owner: Optional[str] = None) -> None:
        """Hide the tooltip; with ``owner`` only when that chart owns it."""
        if self._state is None or not self._state.visible:
            return
        if owner is not None and self._state.owner != owner:
            return
        self._state = replace(self._state, visible=False)
        self._notify()

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:  # noqa: BLE001
                log.exception("Tooltip listener failed")


def _pct_text(part: int, whole: int) -> str:
    if whole <= 0:
        return "-"
    return f"{part / whole * 100.0:.1f}%"


def format_bar_breakdown(bucket: Bucket, colors: Optional[dict] = None) -> List[TooltipLine]:
    colors = colors or {}
    total = bucket.total
    return [
        TooltipLine(bucket.key, bold=True),
        TooltipLine(f"Fatal: {bucket.fatal_count} ({_pct_text(bucket.fatal_count, total)})", colors.get("fatal")),
        TooltipLine(
            f"Non-Fatal: {bucket.non_fatal_count} ({_pct_text(bucket.non_fatal_count, total)})",
            colors.get("non_fatal"),
        ),
        TooltipLine(
            f"Unknown: {bucket.unknown_count} ({_pct_text(bucket.unknown_count, total)})", colors.get("unknown")
        ),
    ]


def format_slice(label: str, value: int, total: int) -> List[TooltipLine]:
    return [TooltipLine(f"{label}: {value} ({_pct_text(value, total)})")]


def format_year_values(year: int, values: Sequence[Tuple[str, int, Optional[str]]]) -> List[TooltipLine]:
    """Year header plus one line per (key, value, color) series."""
    lines = [TooltipLine(f"Year: {year}", bold=True)]
    lines.extend(TooltipLine(f"{key}: {value} attacks", color) for key, value, color in values)
    return lines


def format_radar_point(key: str, month: int, value: int) -> List[TooltipLine]:
    return [TooltipLine(key, bold=True), TooltipLine(f"{MONTH_NAMES[month]}: {value} attacks")]
