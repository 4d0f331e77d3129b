from __future__ import annotations

from datetime import date
from dataclasses import fields
import math
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from incident_charts.charting.shapes import Group, Path
from incident_charts.data.records import IncidentRecord


def make_record(
    year: Optional[int], category: Optional[str] = "USA", fatal: Optional[bool] = False, month: int = 1
) -> IncidentRecord:
    return IncidentRecord(date(year, month, 1) if year is not None else None, category, fatal)


def make_records(rows: Iterable[Tuple[str, int, int, int, int]]) -> List[IncidentRecord]:
    """Records from (category, year, fatal, non_fatal, unknown) count tuples."""
    out: List[IncidentRecord] = []
    for category, year, fatal, non_fatal, unknown in rows:
        out += [make_record(year, category, True) for _ in range(fatal)]
        out += [make_record(year, category, False) for _ in range(non_fatal)]
        out += [make_record(year, category, None) for _ in range(unknown)]
    return out


def sample_records() -> List[IncidentRecord]:
    """A small multi-category corpus spanning 2000-2010."""
    records = make_records(
        [
            ("USA", 2000, 2, 5, 1),
            ("USA", 2005, 1, 4, 0),
            ("AUSTRALIA", 2001, 3, 2, 0),
            ("AUSTRALIA", 2008, 0, 3, 1),
            ("SOUTH AFRICA", 2003, 2, 1, 0),
            ("BRAZIL", 2010, 1, 0, 0),
            ("FIJI", 2004, 0, 1, 0),
        ]
    )
    # a few seasonal records and one undated row
    records += [make_record(2006, "USA", False, month=m) for m in (6, 7, 7, 8)]
    records.append(make_record(None, "USA", True))
    return records


def _numbers(shape: Any) -> Iterator[float]:
    for f in fields(shape):
        value = getattr(shape, f.name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            yield float(value)
    if isinstance(shape, Path):
        for x, y in shape.points:
            yield float(x)
            yield float(y)
    if isinstance(shape, Group):
        yield from (float(v) for v in shape.translate)
        for child in shape.children:
            yield from _numbers(child)


def assert_finite(surface: Any) -> None:
    """Fail when any numeric shape attribute of the last frame is NaN or infinite."""
    for shape in surface.shapes:
        for value in _numbers(shape):
            assert math.isfinite(value), f"non-finite value in {shape!r}"


__all__ = ["make_record", "make_records", "sample_records", "assert_finite"]
