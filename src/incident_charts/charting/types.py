"""Core charting types.

``ChartConfig`` is the explicit per-view UI state (what used to be loose
session keys). ``InteractionState`` is the transient state a renderer reads
on top of it (hover, in-flight pan buffer, pinned keys); it is never
persisted by renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from incident_charts.data.aggregation import TOP_N_SIZES, SortOrder
from incident_charts.data.window import DateWindow

__all__ = [
    "ZOOM_MIN",
    "ZOOM_MAX",
    "ZOOM_STEP",
    "clamp_zoom",
    "SelectionModeError",
    "SelectionMode",
    "ChartConfig",
    "InteractionState",
    "ChartRequest",
    "ChartResult",
]

log = logging.getLogger(__name__)

ZOOM_MIN = 0.5
ZOOM_MAX = 5.0
ZOOM_STEP = 0.2
CUSTOM_SELECTION_LIMIT = 10


def clamp_zoom(value: float) -> float:
    """Round to two decimals then clamp into [ZOOM_MIN, ZOOM_MAX]."""
    return min(max(round(float(value), 2), ZOOM_MIN), ZOOM_MAX)


class SelectionModeError(ValueError):
    """Raised for an unsupported top-N size or selection mode kind."""


@dataclass(frozen=True)
class SelectionMode:
    """Either ``top(n)`` or ``custom(keys)`` with a maximum size.

    Custom keys are unique and keep insertion order. Adding a key beyond
    ``limit`` is ignored.
    """

    kind: str = "top"
    size: int = 15
    keys: Tuple[str, ...] = ()
    limit: int = CUSTOM_SELECTION_LIMIT

    @classmethod
    def top(cls, size: int) -> "SelectionMode":
        if size not in TOP_N_SIZES:
            raise SelectionModeError(f"Top-N size must be one of {TOP_N_SIZES}, got {size!r}")
        return cls("top", size=size)

    @classmethod
    def custom(cls, keys: Iterable[str] = (), limit: int = CUSTOM_SELECTION_LIMIT) -> "SelectionMode":
        unique: list[str] = []
        for key in keys:
            if key and key not in unique:
                unique.append(key)
        return cls("custom", size=0, keys=tuple(unique[:limit]), limit=limit)

    @property
    def is_custom(self) -> bool:
        return self.kind == "custom"

    @property
    def is_full(self) -> bool:
        return len(self.keys) >= self.limit

    def toggled(self, key: str) -> "SelectionMode":
        """Add or remove ``key`` in a custom selection."""
        if not self.is_custom:
            return self
        if key in self.keys:
            return replace(self, keys=tuple(k for k in self.keys if k != key))
        if self.is_full:
            log.debug("Selection full (%d), ignoring %s", self.limit, key)
            return self
        return replace(self, keys=self.keys + (key,))

    def pruned(self, available: Iterable[str]) -> "SelectionMode":
        """Drop custom keys not in ``available`` (stale after a window change)."""
        allowed = set(available)
        kept = tuple(k for k in self.keys if k in allowed)
        if kept == self.keys:
            return self
        return replace(self, keys=kept)

    def to_dict(self) -> Dict[str, Any]:
        if self.is_custom:
            return {"kind": "custom", "keys": list(self.keys), "limit": self.limit}
        return {"kind": "top", "size": self.size}

    @classmethod
    def from_dict(cls, data: Any, default: "SelectionMode") -> "SelectionMode":
        if not isinstance(data, Mapping):
            return default
        try:
            if data.get("kind") == "top":
                return cls.top(int(data["size"]))
            if data.get("kind") == "custom":
                keys = [str(k) for k in data.get("keys", [])]
                return cls.custom(keys, limit=int(data.get("limit", default.limit)))
        except (KeyError, TypeError, ValueError):
            pass
        log.debug("Invalid selection mode payload %r, using default", data)
        return default


@dataclass(frozen=True)
class ChartConfig:
    """Serializable per-view configuration."""

    date_window: DateWindow = field(default_factory=DateWindow)
    selection_mode: SelectionMode = field(default_factory=lambda: SelectionMode.top(15))
    sort_order: SortOrder = SortOrder.BY_COUNT
    zoom: float = 1.0
    pan: Tuple[float, float] = (0.0, 0.0)
    pinned_keys: Tuple[str, ...] = ()
    through_year: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date_window": self.date_window.to_dict(),
            "selection_mode": self.selection_mode.to_dict(),
            "sort_order": self.sort_order.value,
            "zoom": self.zoom,
            "pan": [self.pan[0], self.pan[1]],
            "pinned_keys": list(self.pinned_keys),
            "through_year": self.through_year,
        }

    @classmethod
    def from_dict(cls, data: Any, defaults: Optional["ChartConfig"] = None) -> "ChartConfig":
        """Build a config from a payload; each malformed field falls back."""
        base = defaults or cls()
        if not isinstance(data, Mapping):
            return base
        window = DateWindow.from_dict(data.get("date_window")) if "date_window" in data else base.date_window
        try:
            sort_order = SortOrder(data.get("sort_order", base.sort_order))
        except ValueError:
            sort_order = base.sort_order
        try:
            zoom = clamp_zoom(data.get("zoom", base.zoom))
        except (TypeError, ValueError):
            zoom = base.zoom
        try:
            px, py = data.get("pan", base.pan)
            pan = (float(px), float(py))
        except (TypeError, ValueError):
            pan = base.pan
        pinned = data.get("pinned_keys", base.pinned_keys)
        pinned_keys = tuple(str(k) for k in pinned) if isinstance(pinned, (list, tuple)) else base.pinned_keys
        through = data.get("through_year", base.through_year)
        through_year = through if isinstance(through, int) and not isinstance(through, bool) else base.through_year
        return cls(
            date_window=window,
            selection_mode=SelectionMode.from_dict(data.get("selection_mode"), base.selection_mode),
            sort_order=sort_order,
            zoom=zoom,
            pan=pan,
            pinned_keys=pinned_keys,
            through_year=through_year,
        )


@dataclass(frozen=True)
class InteractionState:
    """Transient render inputs owned by the interaction layer.

    Attributes:
        zoom: Scale factor, always inside [ZOOM_MIN, ZOOM_MAX].
        pan: Pixel translation (committed pan plus any in-flight drag buffer).
        hover_key: Hovered key; a year (int) for the time series.
        pinned: Keys whose value labels are shown permanently.
    """

    zoom: float = 1.0
    pan: Tuple[float, float] = (0.0, 0.0)
    hover_key: Any = None
    pinned: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "zoom", clamp_zoom(self.zoom))

    @classmethod
    def from_config(cls, config: ChartConfig, **overrides: Any) -> "InteractionState":
        state = cls(zoom=config.zoom, pan=config.pan, pinned=config.pinned_keys)
        return replace(state, **overrides) if overrides else state


@dataclass(frozen=True)
class ChartRequest:
    """A logical render request.

    Attributes:
        chart_type: Identifier registered in the chart registry (e.g. 'radar.monthly').
        records: Record sequence the chart aggregates (never modified).
        config: Committed view configuration.
        state: Transient interaction state layered on top of ``config``.
    """

    chart_type: str
    records: Sequence[Any]
    config: ChartConfig
    state: Optional[InteractionState] = None

    def effective_state(self) -> InteractionState:
        return self.state if self.state is not None else InteractionState.from_config(self.config)


@dataclass
class ChartResult:
    """Outcome of a registry render.

    ``meta`` always holds ``status`` ('ok' or 'empty') and ``build_ms``.
    """

    surface: Any
    meta: Dict[str, Any]
