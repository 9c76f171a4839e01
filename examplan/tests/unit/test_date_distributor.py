# examplan/tests/unit/test_date_distributor.py

import pytest
from datetime import datetime, timedelta, timezone

from examplan.services.scheduling.date_distributor import distribute

START = datetime(2025, 1, 1)
END = datetime(2025, 1, 10)


def test_zero_items_gives_empty_list():
    assert distribute(0, START, END) == []


def test_single_item_sits_on_window_start():
    assert distribute(1, START, END) == [START]


def test_two_items_touch_both_endpoints():
    assert distribute(2, START, END) == [START, END]


def test_even_spacing_across_window():
    dates = distribute(4, START, END)

    assert dates == [
        datetime(2025, 1, 1),
        datetime(2025, 1, 4),
        datetime(2025, 1, 7),
        datetime(2025, 1, 10),
    ]


def test_last_date_is_exact_for_uneven_steps():
    end = START + timedelta(days=1)
    dates = distribute(7, START, end)

    assert dates[0] == START
    assert dates[-1] == end
    assert dates == sorted(dates)


def test_reversed_window_collapses_to_start():
    assert distribute(3, END, START) == [END, END, END]


def test_zero_length_window():
    assert distribute(3, START, START) == [START, START, START]


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        distribute(-1, START, END)


def test_deterministic():
    assert distribute(5, START, END) == distribute(5, START, END)


def test_aware_window_keeps_offset():
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    end = datetime(2025, 1, 10, tzinfo=timezone.utc)

    dates = distribute(3, start, end)

    assert dates == [start, datetime(2025, 1, 5, 12, tzinfo=timezone.utc), end]
    assert all(d.tzinfo is timezone.utc for d in dates)
