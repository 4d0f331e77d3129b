"""Date window validation and helpers."""

from __future__ import annotations

import pytest

from incident_charts.data.window import CORPUS_END, CORPUS_START, DateWindow, DateWindowError, parse_date_window


def test_default_window_is_full_corpus():
    w = DateWindow()
    assert (w.start, w.end) == (CORPUS_START, CORPUS_END) == (1900, 2023)
    assert w.span == 123


def test_parse_valid_window():
    assert parse_date_window("2000", " 2010 ") == DateWindow(2000, 2010)
    assert parse_date_window(1990, 1990).span == 0


@pytest.mark.parametrize(
    "start,end,message",
    [
        ("abc", "2000", "Please enter valid years"),
        ("2000", "", "Please enter valid years"),
        ("1899", "2000", "Start year must be between 1900 and 2023"),
        ("2000", "2024", "End year must be between 1900 and 2023"),
        ("2010", "2000", "End year must be greater than or equal to start year"),
    ],
)
def test_parse_rejections_carry_user_message(start, end, message):
    with pytest.raises(DateWindowError) as exc:
        parse_date_window(start, end)
    assert str(exc.value) == message


def test_date_window_error_is_value_error():
    assert issubclass(DateWindowError, ValueError)


def test_inverted_window_rejected():
    with pytest.raises(DateWindowError):
        DateWindow(2010, 2000)


def test_clamped_orders_and_bounds():
    assert DateWindow.clamped(2050, 1800) == DateWindow(1900, 2023)
    assert DateWindow.clamped(2010, 2000) == DateWindow(2000, 2010)


def test_contains_and_years():
    w = DateWindow(2000, 2003)
    assert w.contains(2000) and w.contains(2003)
    assert not w.contains(1999)
    assert not w.contains(None)
    assert list(w.years()) == [2000, 2001, 2002, 2003]
    assert w.clamp_year(1950) == 2000
    assert w.clamp_year(2100) == 2003


def test_dict_round_trip_and_fallback():
    w = DateWindow(1950, 1960)
    assert DateWindow.from_dict(w.to_dict()) == w
    assert DateWindow.from_dict({"start": "x"}) == DateWindow()
    assert DateWindow.from_dict(None) == DateWindow()
