"""Selector list helpers for the category pickers.

Candidates are the categories with data in the window (optionally with the
synthetic GLOBAL entry), ordered by the view's sort order, minus the keys
already selected, filtered by a case-insensitive search term.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from incident_charts.charting.types import SelectionMode
from incident_charts.data.aggregation import Bucket, GroupBy, SortOrder, aggregate, rank_categories
from incident_charts.data.records import IncidentRecord
from incident_charts.data.window import DateWindow

__all__ = ["SelectorItem", "category_counts", "selector_candidates", "prune_selection"]


@dataclass(frozen=True)
class SelectorItem:
    key: str
    count: int


def category_counts(
    records: Sequence[IncidentRecord], window: DateWindow, *, include_global: bool = False
) -> Dict[str, Bucket]:
    return aggregate(records, window, GroupBy.CATEGORY, include_global=include_global)


def selector_candidates(
    records: Sequence[IncidentRecord],
    window: DateWindow,
    sort_order: SortOrder | str,
    selected: Sequence[str] = (),
    search: str = "",
    *,
    include_global: bool = False,
) -> List[SelectorItem]:
    buckets = category_counts(records, window, include_global=include_global)
    term = search.strip().lower()
    chosen = set(selected)
    return [
        SelectorItem(key, buckets[key].total)
        for key in rank_categories(buckets, sort_order)
        if key not in chosen and term in key.lower()
    ]


def prune_selection(
    mode: SelectionMode,
    records: Sequence[IncidentRecord],
    window: DateWindow,
    *,
    include_global: bool = False,
) -> SelectionMode:
    """Drop custom keys without data in ``window``; top-N modes are unchanged."""
    if not mode.is_custom:
        return mode
    return mode.pruned(category_counts(records, window, include_global=include_global))
