"""Tests for the streak calculator."""
from datetime import date

from app.services.routines.streaks import calculate_streaks


def test_empty_input():
    result = calculate_streaks([])
    assert (result.current, result.max) == (0, 0)


def test_consecutive_days_ending_today():
    result = calculate_streaks(
        ["2024-04-01", "2024-04-02", "2024-04-03"],
        today=date(2024, 4, 3),
    )
    assert (result.current, result.max) == (3, 3)


def test_gap_breaks_current_but_keeps_max():
    result = calculate_streaks(
        ["2024-04-01", "2024-04-02", "2024-04-05", "2024-04-06"],
        today=date(2024, 4, 6),
    )
    assert (result.current, result.max) == (2, 2)


def test_longer_historical_run_is_max():
    result = calculate_streaks(
        ["2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04", "2024-03-10"],
        today=date(2024, 3, 10),
    )
    assert result.current == 1
    assert result.max == 4


def test_unordered_input_with_duplicates():
    result = calculate_streaks(
        ["2024-04-03", "2024-04-01", "2024-04-02", "2024-04-02", "2024-04-03"],
        today=date(2024, 4, 3),
    )
    assert (result.current, result.max) == (3, 3)


def test_latest_date_before_today_anchors_at_latest():
    # Last completion was days ago: the trailing run still ends at it
    result = calculate_streaks(
        ["2024-04-01", "2024-04-02"],
        today=date(2024, 4, 20),
    )
    assert (result.current, result.max) == (2, 2)


def test_single_date():
    result = calculate_streaks(["2024-02-29"], today=date(2024, 3, 1))
    assert (result.current, result.max) == (1, 1)


def test_run_across_month_and_leap_day():
    result = calculate_streaks(
        ["2024-02-28", "2024-02-29", "2024-03-01"],
        today=date(2024, 3, 1),
    )
    assert (result.current, result.max) == (3, 3)


def test_run_across_year_boundary():
    result = calculate_streaks(
        ["2023-12-30", "2023-12-31", "2024-01-01"],
        today=date(2024, 1, 1),
    )
    assert (result.current, result.max) == (3, 3)


def test_current_never_exceeds_max():
    samples = [
        ["2024-01-01"],
        ["2024-01-01", "2024-01-03", "2024-01-04"],
        ["2024-01-05", "2024-01-01", "2024-01-02", "2024-01-03"],
    ]
    for dates in samples:
        result = calculate_streaks(dates, today=date(2024, 1, 4))
        assert 0 <= result.current <= result.max
