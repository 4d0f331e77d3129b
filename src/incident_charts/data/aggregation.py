"""Aggregation engine: records -> per-key buckets.

All results are rebuilt from scratch for every call; buckets are never
patched incrementally once handed to a renderer.

Fatality classification is tri-state: ``True`` is fatal, ``False`` is
non-fatal and any other value is unknown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .records import IncidentRecord
from .window import DateWindow

__all__ = [
    "GLOBAL_KEY",
    "OTHERS_KEY",
    "FATALITY_KEYS",
    "MONTH_NAMES",
    "TOP_N_SIZES",
    "GroupBy",
    "SortOrder",
    "Bucket",
    "Summary",
    "classify_fatality",
    "filter_records",
    "aggregate",
    "top_n",
    "majority_share",
    "select_keys",
    "rank_categories",
    "summarize",
]

log = logging.getLogger(__name__)

GLOBAL_KEY = "GLOBAL"
OTHERS_KEY = "OTHERS"
FATALITY_KEYS = ("FATAL", "NON-FATAL", "UNKNOWN")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
TOP_N_SIZES = (5, 10, 15)
MAJORITY_SHARE_PERCENT = 5


class SortOrder(str, Enum):
    ALPHABETICAL = "alphabetical"
    BY_COUNT = "count"


class GroupBy(str, Enum):
    CATEGORY = "category"
    FATALITY = "fatality"
    MONTH = "month"
    YEAR = "year"


def classify_fatality(value: object) -> str:
    """Return 'fatal', 'non_fatal' or 'unknown'."""
    if value is True:
        return "fatal"
    if value is False:
        return "non_fatal"
    return "unknown"


def _pct(part: int, whole: int) -> Optional[float]:
    if whole <= 0:
        return None
    return round(part / whole * 100.0, 1)


@dataclass
class Bucket:
    """Counts and sub-series for one key over a date window.

    ``total`` is always ``fatal + non_fatal + unknown``.
    """

    key: str
    fatal_count: int = 0
    non_fatal_count: int = 0
    unknown_count: int = 0
    per_year: Dict[int, int] = field(default_factory=dict)
    per_month: List[int] = field(default_factory=lambda: [0] * 12)

    @property
    def total(self) -> int:
        return self.fatal_count + self.non_fatal_count + self.unknown_count

    def add(self, record: IncidentRecord) -> None:
        cls = classify_fatality(record.fatal)
        if cls == "fatal":
            self.fatal_count += 1
        elif cls == "non_fatal":
            self.non_fatal_count += 1
        else:
            self.unknown_count += 1
        if record.year is not None:
            self.per_year[record.year] = self.per_year.get(record.year, 0) + 1
        if record.month is not None:
            self.per_month[record.month] += 1

    @classmethod
    def merged(cls, key: str, buckets: Iterable["Bucket"]) -> "Bucket":
        """Sum several buckets into a new one (used for OTHERS)."""
        out = cls(key)
        for b in buckets:
            out.fatal_count += b.fatal_count
            out.non_fatal_count += b.non_fatal_count
            out.unknown_count += b.unknown_count
            for year, count in b.per_year.items():
                out.per_year[year] = out.per_year.get(year, 0) + count
            for i, count in enumerate(b.per_month):
                out.per_month[i] += count
        return out

    def percentages(self) -> Optional[Dict[str, float]]:
        """One-decimal shares per fatality class, None for an empty bucket."""
        total = self.total
        if total == 0:
            return None
        return {
            "fatal": _pct(self.fatal_count, total),
            "non_fatal": _pct(self.non_fatal_count, total),
            "unknown": _pct(self.unknown_count, total),
        }

    def year_value(self, year: int) -> int:
        return self.per_year.get(year, 0)


@dataclass(frozen=True)
class Summary:
    total: int
    fatal_count: int
    fatal_percentage: Optional[float]
    top_category: Optional[str]
    top_share: Optional[float]


def filter_records(
    records: Iterable[IncidentRecord],
    window: DateWindow,
    *,
    through_year: Optional[int] = None,
) -> List[IncidentRecord]:
    """Records with a parsed date inside ``window`` (and <= through_year)."""
    out = []
    for r in records:
        year = r.year
        if not window.contains(year):
            continue
        if through_year is not None and year > through_year:
            continue
        out.append(r)
    return out


def _bucket_key(record: IncidentRecord, group_by: GroupBy) -> Optional[str]:
    if group_by is GroupBy.CATEGORY:
        return record.category or None
    if group_by is GroupBy.FATALITY:
        return FATALITY_KEYS[("fatal", "non_fatal", "unknown").index(classify_fatality(record.fatal))]
    if group_by is GroupBy.MONTH:
        return MONTH_NAMES[record.month]  # type: ignore[index]
    return str(record.year)


def aggregate(
    records: Iterable[IncidentRecord],
    window: DateWindow,
    group_by: GroupBy | str = GroupBy.CATEGORY,
    *,
    include_global: bool = False,
    through_year: Optional[int] = None,
) -> Dict[str, Bucket]:
    """Group the records inside ``window`` into buckets keyed by ``group_by``.

    Key order: first appearance for categories, fixed order for fatality
    classes and months, ascending for years. The synthetic GLOBAL bucket, when
    requested, is appended last and covers every filtered record (including
    those without a category).
    """
    group_by = GroupBy(group_by)
    filtered = filter_records(records, window, through_year=through_year)

    buckets: Dict[str, Bucket] = {}
    if group_by is GroupBy.FATALITY:
        buckets = {k: Bucket(k) for k in FATALITY_KEYS}
    elif group_by is GroupBy.MONTH:
        buckets = {k: Bucket(k) for k in MONTH_NAMES}

    global_bucket = Bucket(GLOBAL_KEY)
    for record in filtered:
        global_bucket.add(record)
        key = _bucket_key(record, group_by)
        if key is None:
            continue
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = Bucket(key)
        bucket.add(record)

    if group_by is GroupBy.YEAR:
        buckets = {k: buckets[k] for k in sorted(buckets, key=int)}
    if include_global:
        if buckets.pop(GLOBAL_KEY, None) is not None:
            log.warning("Category %r uses a reserved key; the overall bucket replaces it", GLOBAL_KEY)
        buckets[GLOBAL_KEY] = global_bucket
    log.debug(
        "aggregate(%s, %s-%s) -> %d buckets from %d records",
        group_by.value,
        window.start,
        window.end,
        len(buckets),
        len(filtered),
    )
    return buckets


def _categories_only(buckets: Mapping[str, Bucket]) -> List[Bucket]:
    return [b for k, b in buckets.items() if k != GLOBAL_KEY]


def top_n(buckets: Mapping[str, Bucket], n: int) -> Dict[str, Bucket]:
    """First ``n`` buckets by total, descending; ties keep insertion order."""
    ranked = sorted(_categories_only(buckets), key=lambda b: b.total, reverse=True)
    return {b.key: b for b in ranked[: max(0, int(n))]}


def majority_share(
    buckets: Mapping[str, Bucket], threshold_percent: float = MAJORITY_SHARE_PERCENT
) -> Dict[str, Bucket]:
    """Keep categories at or above the share threshold, merge the rest.

    Kept categories stay in insertion order. The merged OTHERS bucket is the
    exact sum of the excluded totals and is present only when that sum > 0.
    A real category named OTHERS is always folded into the merged bucket.
    """
    categories = _categories_only(buckets)
    grand_total = sum(b.total for b in categories)
    kept: Dict[str, Bucket] = {}
    excluded: List[Bucket] = []
    for b in categories:
        if b.key == OTHERS_KEY:
            log.warning("Category %r uses a reserved key; merged with the small categories", OTHERS_KEY)
            excluded.append(b)
        elif b.total * 100 < threshold_percent * grand_total:
            excluded.append(b)
        else:
            kept[b.key] = b
    others = Bucket.merged(OTHERS_KEY, excluded)
    if others.total > 0:
        kept[OTHERS_KEY] = others
    return kept


def select_keys(buckets: Mapping[str, Bucket], allow_list: Sequence[str]) -> Dict[str, Bucket]:
    """Only allow-listed keys, in the supplied order.

    An empty allow-list means "nothing selected" and yields an empty result.
    Keys without data in the window are skipped.
    """
    out: Dict[str, Bucket] = {}
    for key in allow_list:
        if key in buckets and key not in out:
            out[key] = buckets[key]
    return out


def rank_categories(buckets: Mapping[str, Bucket], sort_order: SortOrder | str) -> List[str]:
    """Order bucket keys for selector lists (alphabetical or by count)."""
    keys = [k for k in buckets if k]
    if SortOrder(sort_order) is SortOrder.ALPHABETICAL:
        return sorted(keys)
    return sorted(keys, key=lambda k: buckets[k].total, reverse=True)


def summarize(records: Iterable[IncidentRecord], window: DateWindow) -> Summary:
    """Totals shown in the summary box and at the donut centers."""
    by_category = aggregate(records, window, GroupBy.CATEGORY, include_global=True)
    overall = by_category.pop(GLOBAL_KEY)
    top = top_n(by_category, 1)
    top_bucket = next(iter(top.values()), None)
    return Summary(
        total=overall.total,
        fatal_count=overall.fatal_count,
        fatal_percentage=_pct(overall.fatal_count, overall.total),
        top_category=top_bucket.key if top_bucket else None,
        top_share=_pct(top_bucket.total, overall.total) if top_bucket else None,
    )
