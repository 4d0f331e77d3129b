"""Bucket aggregation, ranking and majority-share grouping."""

from __future__ import annotations

import logging

from incident_charts.data.aggregation import (
    FATALITY_KEYS,
    GLOBAL_KEY,
    MONTH_NAMES,
    OTHERS_KEY,
    Bucket,
    GroupBy,
    SortOrder,
    aggregate,
    majority_share,
    rank_categories,
    select_keys,
    summarize,
    top_n,
)
from incident_charts.data.records import record_from_raw
from incident_charts.data.window import DateWindow
from tests.factories import make_record, make_records

WINDOW = DateWindow(2000, 2010)


def test_scenario_single_category_breakdown():
    records = [
        record_from_raw({"date": "2005-03-01", "category": "USA", "fatal": True}),
        record_from_raw({"date": "2005-07-01", "category": "USA", "fatal": False}),
    ]
    buckets = aggregate(records, WINDOW)
    usa = buckets["USA"]
    assert (usa.fatal_count, usa.non_fatal_count, usa.unknown_count, usa.total) == (1, 1, 0, 2)
    assert usa.per_year == {2005: 2}
    assert usa.per_month[2] == 1 and usa.per_month[6] == 1


def test_scenario_majority_share_merges_small_categories():
    records = make_records([("A", 2001, 0, 96, 0), ("B", 2001, 0, 4, 0)])
    grouped = majority_share(aggregate(records, WINDOW))
    assert list(grouped) == ["A", OTHERS_KEY]
    assert grouped["A"].total == 96
    assert grouped[OTHERS_KEY].total == 4


def test_majority_share_threshold_is_inclusive():
    records = make_records([("A", 2001, 0, 95, 0), ("B", 2001, 0, 5, 0)])
    grouped = majority_share(aggregate(records, WINDOW))
    assert list(grouped) == ["A", "B"]


def test_others_is_exact_sum_of_excluded(records):
    buckets = aggregate(records, WINDOW)
    grouped = majority_share(buckets)
    excluded = [k for k in buckets if k not in grouped]
    assert excluded == ["BRAZIL", "FIJI"]
    assert grouped[OTHERS_KEY].total == sum(buckets[k].total for k in excluded)
    assert sum(b.total for b in grouped.values()) == sum(b.total for b in buckets.values())


def test_bucket_total_is_sum_of_classes(records):
    for bucket in aggregate(records, WINDOW, include_global=True).values():
        assert bucket.total == bucket.fatal_count + bucket.non_fatal_count + bucket.unknown_count
        assert bucket.total == sum(bucket.per_month)
        assert bucket.total == sum(bucket.per_year.values())


def test_window_excludes_out_of_range_and_undated():
    records = [
        make_record(1999, "USA"),
        make_record(2000, "USA"),
        make_record(2010, "USA"),
        make_record(2011, "USA"),
        make_record(None, "USA"),
    ]
    buckets = aggregate(records, WINDOW)
    assert buckets["USA"].total == 2
    assert all(WINDOW.contains(y) for y in buckets["USA"].per_year)


def test_global_bucket_last_and_covers_uncategorized():
    records = [make_record(2001, "USA"), make_record(2002, None), make_record(2003, "FIJI")]
    buckets = aggregate(records, WINDOW, include_global=True)
    assert list(buckets) == ["USA", "FIJI", GLOBAL_KEY]
    assert buckets[GLOBAL_KEY].total == 3


def test_category_order_is_first_appearance(records):
    assert list(aggregate(records, WINDOW)) == ["USA", "AUSTRALIA", "SOUTH AFRICA", "BRAZIL", "FIJI"]


def test_fatality_and_month_grouping_have_fixed_keys(records):
    by_fatality = aggregate(records, WINDOW, GroupBy.FATALITY)
    assert tuple(by_fatality) == FATALITY_KEYS
    assert by_fatality["FATAL"].total == 9
    assert sum(b.total for b in by_fatality.values()) == 31
    by_month = aggregate(records, WINDOW, "month")
    assert tuple(by_month) == MONTH_NAMES
    assert by_month["July"].total == 2


def test_year_grouping_ascending(records):
    by_year = aggregate(records, WINDOW, GroupBy.YEAR)
    assert list(by_year) == sorted(by_year, key=int)


def test_through_year_limits_cumulative_window(records):
    buckets = aggregate(records, WINDOW, through_year=2001)
    assert buckets["USA"].total == 8
    assert buckets["AUSTRALIA"].total == 5
    assert "BRAZIL" not in buckets


def test_top_n_descending_with_stable_ties():
    records = make_records([("B", 2001, 0, 2, 0), ("A", 2001, 0, 5, 0), ("C", 2001, 0, 2, 0)])
    buckets = aggregate(records, WINDOW, include_global=True)
    assert list(top_n(buckets, 5)) == ["A", "B", "C"]
    assert list(top_n(buckets, 1)) == ["A"]


def test_top_n_totals_non_increasing(records):
    totals = [b.total for b in top_n(aggregate(records, WINDOW), 10).values()]
    assert totals == sorted(totals, reverse=True)


def test_select_keys_keeps_allow_list_order(records):
    buckets = aggregate(records, WINDOW, include_global=True)
    assert list(select_keys(buckets, ["FIJI", GLOBAL_KEY, "USA", "MISSING"])) == ["FIJI", GLOBAL_KEY, "USA"]
    assert select_keys(buckets, []) == {}


def test_rank_categories(records):
    buckets = aggregate(records, WINDOW)
    assert rank_categories(buckets, SortOrder.ALPHABETICAL) == ["AUSTRALIA", "BRAZIL", "FIJI", "SOUTH AFRICA", "USA"]
    assert rank_categories(buckets, "count")[:3] == ["USA", "AUSTRALIA", "SOUTH AFRICA"]


def test_percentages_and_empty_bucket():
    assert Bucket("X").percentages() is None
    b = Bucket("X", fatal_count=1, non_fatal_count=2, unknown_count=0)
    assert b.percentages() == {"fatal": 33.3, "non_fatal": 66.7, "unknown": 0.0}


def test_merged_bucket_sums_series():
    a = Bucket("A", fatal_count=1, per_year={2000: 1}, per_month=[1] + [0] * 11)
    b = Bucket("B", non_fatal_count=2, per_year={2000: 1, 2001: 1}, per_month=[0, 2] + [0] * 10)
    m = Bucket.merged("M", [a, b])
    assert m.total == 3
    assert m.per_year == {2000: 2, 2001: 1}
    assert m.per_month[:2] == [1, 2]


def test_summarize(records):
    s = summarize(records, WINDOW)
    assert s.total == 31
    assert s.fatal_count == 9
    assert s.fatal_percentage == 29.0
    assert s.top_category == "USA"
    assert s.top_share == 54.8


def test_summarize_empty_window_has_no_percentages(records):
    s = summarize(records, DateWindow(1900, 1901))
    assert s.total == 0
    assert s.fatal_percentage is None
    assert s.top_category is None


def test_real_category_named_global_is_reported(caplog):
    records = make_records([(GLOBAL_KEY, 2001, 1, 0, 0), ("USA", 2001, 0, 2, 0)])
    with caplog.at_level(logging.WARNING, logger="incident_charts.data.aggregation"):
        buckets = aggregate(records, WINDOW, include_global=True)
    assert list(buckets) == ["USA", GLOBAL_KEY]
    assert buckets[GLOBAL_KEY].total == 3
    assert "reserved key" in caplog.text


def test_real_category_named_others_is_folded_into_merged_bucket(caplog):
    records = make_records([("A", 2001, 0, 90, 0), (OTHERS_KEY, 2001, 0, 7, 0), ("B", 2001, 0, 3, 0)])
    with caplog.at_level(logging.WARNING, logger="incident_charts.data.aggregation"):
        kept = majority_share(aggregate(records, WINDOW))
    assert list(kept) == ["A", OTHERS_KEY]
    assert kept[OTHERS_KEY].total == 10
    assert sum(b.total for b in kept.values()) == 100
    assert "reserved key" in caplog.text
