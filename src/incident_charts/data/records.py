"""Incident records and the read-only record store.

The store is a collaborator of the chart engine: it only has to supply an
ordered sequence of records. Parsing a raw date into a calendar date is the
single parsing contract the aggregation layer relies on; anything that does
not parse becomes ``None`` and is filtered out later.

Raw objects follow the cleaned dataset shape::

    {"Date": "2005-03-01", "Country": "USA", "Fatal": true}

Lower-case keys (``date``, ``category``, ``fatal``) are accepted as well.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

__all__ = [
    "IncidentRecord",
    "RecordStore",
    "RecordLoadError",
    "parse_incident_date",
    "record_from_raw",
]

log = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m")


class RecordLoadError(RuntimeError):
    """Raised when a dataset file cannot be read or is not a JSON array."""


@dataclass(frozen=True)
class IncidentRecord:
    """One incident.

    Attributes:
        date: Calendar date of the incident or None when unknown.
        category: Location / category label, None when missing.
        fatal: True (fatal), False (non-fatal) or None (unknown outcome).
    """

    date: Optional[date]
    category: Optional[str]
    fatal: Optional[bool]

    @property
    def year(self) -> Optional[int]:
        return self.date.year if self.date is not None else None

    @property
    def month(self) -> Optional[int]:
        """Zero-based month index (0 = January)."""
        return self.date.month - 1 if self.date is not None else None


def parse_incident_date(value: Any) -> Optional[date]:
    """Return a ``date`` for supported inputs, otherwise None.

    Supports ``date``/``datetime`` instances and ISO-like strings. A trailing
    ``Z`` or fractional seconds are tolerated through ``fromisoformat``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def record_from_raw(raw: Mapping[str, Any]) -> IncidentRecord:
    """Build a record from a raw mapping (dataset row)."""
    category = _first_present(raw, "Country", "category", "country")
    if category is not None:
        category = str(category).strip() or None
    fatal = _first_present(raw, "Fatal", "fatal")
    # only real booleans are classified, everything else is an unknown outcome
    if not isinstance(fatal, bool):
        fatal = None
    return IncidentRecord(
        date=parse_incident_date(_first_present(raw, "Date", "date")),
        category=category,
        fatal=fatal,
    )


class RecordStore(Sequence[IncidentRecord]):
    """Immutable ordered collection of incident records."""

    def __init__(self, records: Iterable[IncidentRecord] = ()) -> None:
        self._records: Tuple[IncidentRecord, ...] = tuple(records)

    @classmethod
    def from_raw(cls, rows: Iterable[Mapping[str, Any]]) -> "RecordStore":
        return cls(record_from_raw(r) for r in rows)

    @classmethod
    def from_json(cls, path: str | Path) -> "RecordStore":
        """Load a JSON array of raw rows from ``path``."""
        p = Path(path)
        try:
            payload = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise RecordLoadError(f"Cannot load incident records from {p}: {exc}") from exc
        if not isinstance(payload, list):
            raise RecordLoadError(f"Expected a JSON array in {p}, got {type(payload).__name__}")
        rows = [r for r in payload if isinstance(r, Mapping)]
        skipped = len(payload) - len(rows)
        if skipped:
            log.warning("Skipped %d non-object rows while loading %s", skipped, p)
        store = cls.from_raw(rows)
        log.debug("Loaded %d incident records from %s", len(store), p)
        return store

    def __getitem__(self, index):  # type: ignore[override]
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IncidentRecord]:
        return iter(self._records)

    def categories(self) -> List[str]:
        """Distinct non-empty categories, alphabetical."""
        return sorted({r.category for r in self._records if r.category})

    def dated(self) -> List[IncidentRecord]:
        return [r for r in self._records if r.date is not None]
