"""Date windows (inclusive year ranges) and user input validation.

A window is always inside the corpus bound. User supplied text goes through
``parse_date_window`` which raises ``DateWindowError`` carrying the message
shown next to the inputs; callers keep their previously committed window on
error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping

__all__ = [
    "CORPUS_START",
    "CORPUS_END",
    "DateWindow",
    "DateWindowError",
    "parse_date_window",
]

CORPUS_START = 1900
CORPUS_END = 2023


class DateWindowError(ValueError):
    """Invalid date window input. ``str(exc)`` is the user-facing message."""


@dataclass(frozen=True)
class DateWindow:
    start: int = CORPUS_START
    end: int = CORPUS_END

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise DateWindowError("End year must be greater than or equal to start year")
        if self.start < CORPUS_START or self.end > CORPUS_END:
            raise DateWindowError(
                f"Date window must lie between {CORPUS_START} and {CORPUS_END}"
            )

    @classmethod
    def clamped(cls, start: int, end: int) -> "DateWindow":
        """Clamp both bounds into the corpus and order them."""
        lo = min(max(int(start), CORPUS_START), CORPUS_END)
        hi = min(max(int(end), CORPUS_START), CORPUS_END)
        if lo > hi:
            lo, hi = hi, lo
        return cls(lo, hi)

    @property
    def span(self) -> int:
        return self.end - self.start

    def contains(self, year: int | None) -> bool:
        return year is not None and self.start <= year <= self.end

    def years(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def clamp_year(self, year: int) -> int:
        return min(max(year, self.start), self.end)

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "DateWindow":
        if not data:
            return cls()
        try:
            return cls.clamped(int(data["start"]), int(data["end"]))
        except (KeyError, TypeError, ValueError):
            return cls()


def _parse_year(text: Any) -> int | None:
    if isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text
    try:
        return int(str(text).strip())
    except (TypeError, ValueError):
        return None


def parse_date_window(
    start_text: Any,
    end_text: Any,
    *,
    min_year: int = CORPUS_START,
    max_year: int = CORPUS_END,
) -> DateWindow:
    """Validate raw start/end input and return a window.

    Raises:
        DateWindowError: non-numeric input, out of bound years, or end < start.
    """
    start = _parse_year(start_text)
    end = _parse_year(end_text)
    if start is None or end is None:
        raise DateWindowError("Please enter valid years")
    if start < min_year or start > max_year:
        raise DateWindowError(f"Start year must be between {min_year} and {max_year}")
    if end < min_year or end > max_year:
        raise DateWindowError(f"End year must be between {min_year} and {max_year}")
    if end < start:
        raise DateWindowError("End year must be greater than or equal to start year")
    return DateWindow(start, end)
