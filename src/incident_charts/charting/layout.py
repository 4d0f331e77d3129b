"""Layout helpers shared by the renderers (margins, labels, placeholders)."""

from __future__ import annotations

from dataclasses import dataclass
import textwrap
from typing import List

from .shapes import Group, Text, estimate_text_width

__all__ = [
    "SELECT_PROMPT",
    "NO_DATA_MESSAGE",
    "Margin",
    "truncate_label",
    "wrap_label",
    "placeholder",
]

SELECT_PROMPT = "Please select one or more locations to display"
NO_DATA_MESSAGE = "No incidents recorded for the selected period"


@dataclass(frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float

    def inner(self, width: float, height: float) -> tuple[float, float]:
        return max(width - self.left - self.right, 0.0), max(height - self.top - self.bottom, 0.0)


def truncate_label(text: str, max_chars: int, keep: int) -> str:
    """``text`` if it fits in ``max_chars``, else its first ``keep`` chars + '...'."""
    return text if len(text) <= max_chars else text[:keep] + "..."


def wrap_label(text: str, max_width: float, size: float = 14.0) -> List[str]:
    """Split on whitespace into lines no wider than ``max_width`` pixels."""
    chars = max(int(max_width // estimate_text_width("x", size)), 1)
    return textwrap.wrap(text, width=chars, break_long_words=False) or [text]


def placeholder(parent: Group, x: float, y: float, message: str, color: str = "#666666") -> Text:
    return parent.add(Text(x, y, message, anchor="middle", size=16, color=color, role="placeholder"))
