"""Chart palette.

Semantic color roles shared by the renderers:
 - fatality classes (bars and the fatality donut)
 - series.n (time series lines, radar strokes, location slices)
 - axis.text / axis.line / grid.line / legend.background / legend.border

Location slices use matplotlib's ``tab10`` qualitative map (the classic
category10 colors).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from matplotlib import colormaps
from matplotlib.colors import to_hex

__all__ = [
    "FATALITY_COLORS",
    "FATALITY_KEY_COLORS",
    "SERIES_COLORS",
    "RADAR_STROKES",
    "ChartPalette",
    "category10",
    "default_palette",
]

FATALITY_COLORS: Dict[str, str] = {
    "fatal": "#e41a1c",
    "non_fatal": "#4e79a7",
    "unknown": "#b3b3b3",
}
FATALITY_KEY_COLORS: Dict[str, str] = {
    "FATAL": FATALITY_COLORS["fatal"],
    "NON-FATAL": FATALITY_COLORS["non_fatal"],
    "UNKNOWN": FATALITY_COLORS["unknown"],
}
SERIES_COLORS: Tuple[str, ...] = ("#4e79a7", "#f28e2c", "#59a14f", "#e15759", "#76b7b2")
RADAR_STROKES: Tuple[str, ...] = ("#2a5a8a", "#ff7f40", "#556b2f")


def category10() -> List[str]:
    cmap = colormaps["tab10"]
    return [to_hex(cmap(i)) for i in range(10)]


@dataclass
class ChartPalette:
    """Color lookups for chart builders."""

    roles: Dict[str, str] = field(
        default_factory=lambda: {
            "axis.text": "#333333",
            "axis.line": "#999999",
            "grid.line": "#e0e0e0",
            "legend.background": "#f8f8f8",
            "legend.border": "#eaeaea",
            "placeholder.text": "#666666",
            "tooltip.background": "#ffffff",
        }
    )
    series: Tuple[str, ...] = SERIES_COLORS
    radar: Tuple[str, ...] = RADAR_STROKES
    categorical: List[str] = field(default_factory=category10)

    def role(self, key: str, default: str = "#333333") -> str:
        return self.roles.get(key, default)

    def color_for_series(self, index: int) -> str:
        return self.series[max(index, 0) % len(self.series)]

    def color_for_radar(self, index: int) -> str:
        return self.radar[max(index, 0) % len(self.radar)]

    def color_for_slice(self, index: int) -> str:
        return self.categorical[max(index, 0) % len(self.categorical)]

    def fatality(self, cls: str) -> str:
        return FATALITY_COLORS.get(cls) or FATALITY_KEY_COLORS.get(cls, self.role("placeholder.text"))


default_palette = ChartPalette()
