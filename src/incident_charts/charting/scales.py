"""Scale engine: domains, ranges and tick sequences.

Scales are pure derived data. They are rebuilt for every render from the
aggregated extremes, never cached across bucket changes.

Step tables (upper bound inclusive -> step):
 - linear count axis: <=50 -> 10, <=600 -> 50, <=1600 -> 200, else 400
 - radial nice max:   <=10 -> 2, <=50 -> 5, else 10
 - radial ring grid:  <=10 -> 2, <=30 -> 5, <=60 -> 10, <=100 -> 20, else 50
 - year axis (span):  <=1 -> 1, <=20 -> 2, <=50 -> 5, <=100 -> 10, else 20
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence, Tuple

from matplotlib.ticker import MaxNLocator

from incident_charts.data.window import DateWindow

__all__ = [
    "ScaleSpec",
    "BandScale",
    "LINEAR_STEPS",
    "RADIAL_STEPS",
    "RADIAL_GRID_STEPS",
    "YEAR_STEPS",
    "step_for",
    "round_up",
    "padded_max",
    "linear_count_scale",
    "value_axis_scale",
    "radial_scale",
    "year_tick_step",
    "year_ticks",
    "year_scale",
]

LINEAR_STEPS: Tuple[Tuple[int, int], ...] = ((50, 10), (600, 50), (1600, 200))
LINEAR_STEP_MAX = 400
RADIAL_STEPS: Tuple[Tuple[int, int], ...] = ((10, 2), (50, 5))
RADIAL_STEP_MAX = 10
RADIAL_GRID_STEPS: Tuple[Tuple[int, int], ...] = ((10, 2), (30, 5), (60, 10), (100, 20))
RADIAL_GRID_STEP_MAX = 50
YEAR_STEPS: Tuple[Tuple[int, int], ...] = ((1, 1), (20, 2), (50, 5), (100, 10))
YEAR_STEP_MAX = 20

AXIS_PADDING = 1.1
COUNT_FLOOR = 10
COUNT_ROUNDING = 50


@dataclass(frozen=True)
class ScaleSpec:
    """Linear mapping ``domain -> range`` plus the tick values to draw."""

    domain: Tuple[float, float]
    range: Tuple[float, float]
    tick_values: Tuple[float, ...] = ()

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2.0
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, position: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        return d0 + (position - r0) / (r1 - r0) * (d1 - d0)

    @property
    def upper(self) -> float:
        return self.domain[1]


@dataclass(frozen=True)
class BandScale:
    """Equal-width bands over ordered keys (padding applies inside and outside)."""

    keys: Tuple[str, ...]
    range: Tuple[float, float]
    padding: float = 0.2

    @property
    def step(self) -> float:
        n = len(self.keys)
        if n == 0:
            return 0.0
        r0, r1 = self.range
        return (r1 - r0) / (n + self.padding)

    @property
    def bandwidth(self) -> float:
        return self.step * (1.0 - self.padding)

    def __call__(self, key: str) -> float:
        index = self.keys.index(key)
        r0, r1 = self.range
        n = len(self.keys)
        offset = (r1 - r0 - self.step * (n - self.padding)) * 0.5
        return r0 + offset + self.step * index

    def center(self, key: str) -> float:
        return self(key) + self.bandwidth / 2.0


def step_for(value: float, table: Sequence[Tuple[int, int]], default: int) -> int:
    for bound, step in table:
        if value <= bound:
            return step
    return default


def round_up(value: float, step: int) -> int:
    return int(math.ceil(value / step) * step)


def padded_max(max_value: float, floor_minimum: int = COUNT_FLOOR, padding: float = AXIS_PADDING) -> int:
    """``max(ceil(max_value * padding), floor_minimum)`` without float noise."""
    return max(int(math.ceil(round(max_value * padding, 9))), floor_minimum)


def linear_count_scale(
    max_value: float,
    range_px: Tuple[float, float],
    *,
    floor_minimum: int = COUNT_FLOOR,
    rounding: int = COUNT_ROUNDING,
) -> ScaleSpec:
    """Count axis used by the stacked bars.

    The padded maximum is rounded to the next multiple of ``rounding`` and
    then raised to the next multiple of the tick step, so the last tick is
    the domain bound.
    """
    rounded = round_up(padded_max(max_value, floor_minimum), rounding)
    step = step_for(rounded, LINEAR_STEPS, LINEAR_STEP_MAX)
    upper = round_up(rounded, step)
    return ScaleSpec((0, upper), tuple(range_px), tuple(range(0, upper + 1, step)))


def value_axis_scale(
    max_value: float | None,
    range_px: Tuple[float, float],
    *,
    floor_minimum: int = COUNT_FLOOR,
    max_ticks: int = 10,
) -> ScaleSpec:
    """Y axis of the time series (nice 1/2/5 ticks).

    ``max_value`` None means no series is drawn: the domain is the floor.
    """
    if max_value is None:
        top = floor_minimum
    else:
        top = int(math.ceil(round(max(max_value, floor_minimum) * AXIS_PADDING, 9)))
    locator = MaxNLocator(nbins=max_ticks, steps=[1, 2, 5, 10], integer=True)
    ticks = [float(t) for t in locator.tick_values(0, top) if 0 <= t <= top + 1e-9]
    if not ticks:
        ticks = [0.0, float(top)]
    if ticks[-1] < top:
        step = ticks[1] - ticks[0] if len(ticks) > 1 else float(top)
        ticks.append(ticks[-1] + step)
    return ScaleSpec((0, ticks[-1]), tuple(range_px), tuple(ticks))


def radial_scale(max_value: float, radius: float) -> ScaleSpec:
    """Radius scale for the radar chart; ticks are the grid ring values."""
    peak = max(int(math.ceil(max_value)), 1)
    nice = round_up(peak, step_for(peak, RADIAL_STEPS, RADIAL_STEP_MAX))
    ring = step_for(nice, RADIAL_GRID_STEPS, RADIAL_GRID_STEP_MAX)
    # domain grows to the next ring multiple (peak 35 -> rings of 10 -> 40)
    # so the outermost grid ring always sits on the chart edge
    upper = round_up(nice, ring)
    return ScaleSpec((0, upper), (0, radius), tuple(range(ring, upper + 1, ring)))


def year_tick_step(span: int) -> int:
    return step_for(span, YEAR_STEPS, YEAR_STEP_MAX)


def year_ticks(window: DateWindow) -> Tuple[int, ...]:
    """Year ticks on the step grid, strictly increasing."""
    step = year_tick_step(window.span)
    first = round_up(window.start, step)
    ticks = set(range(first, window.end + 1, step))
    # window edges only join when they sit on the grid
    if window.start % step == 0:
        ticks.add(window.start)
    if window.end % step == 0:
        ticks.add(window.end)
    return tuple(sorted(ticks))


def year_scale(window: DateWindow, range_px: Tuple[float, float]) -> ScaleSpec:
    return ScaleSpec((window.start, window.end), tuple(range_px), year_ticks(window))
