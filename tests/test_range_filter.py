"""Test calendar window bounds."""
from datetime import datetime, timedelta, timezone

from verticals.tasks.models.schemas import Window
from verticals.tasks.range_filter import in_window, to_utc, window_bounds

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)  # Monday
ONE_US = timedelta(microseconds=1)


def test_today_is_midnight_to_midnight():
    start, end = window_bounds(Window.TODAY, NOW)
    assert start == datetime(2024, 5, 20, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 21, tzinfo=timezone.utc) - ONE_US


def test_week_starts_on_sunday_by_default():
    start, end = window_bounds(Window.THIS_WEEK, NOW)
    assert start == datetime(2024, 5, 19, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 26, tzinfo=timezone.utc) - ONE_US


def test_week_start_monday():
    start, _ = window_bounds("this_week", NOW, week_start=0)
    assert start == datetime(2024, 5, 20, tzinfo=timezone.utc)


def test_month_bounds():
    start, end = window_bounds(Window.THIS_MONTH, NOW)
    assert start == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert end == datetime(2024, 6, 1, tzinfo=timezone.utc) - ONE_US


def test_december_rolls_into_next_year():
    start, end = window_bounds(Window.THIS_MONTH, datetime(2024, 12, 31, 23, 0, tzinfo=timezone.utc))
    assert start == datetime(2024, 12, 1, tzinfo=timezone.utc)
    assert end == datetime(2025, 1, 1, tzinfo=timezone.utc) - ONE_US


def test_timezone_shifts_the_local_day():
    # 02:00 UTC on the 20th is still the evening of the 19th in New York.
    now = datetime(2024, 5, 20, 2, 0, tzinfo=timezone.utc)
    start, end = window_bounds(Window.TODAY, now, tz="America/New_York")
    assert start.date().isoformat() == "2024-05-19"
    utc_start, utc_end = to_utc((start, end))
    assert utc_start == datetime(2024, 5, 19, 4, 0, tzinfo=timezone.utc)
    assert utc_end == datetime(2024, 5, 20, 4, 0, tzinfo=timezone.utc) - ONE_US


def test_naive_now_is_utc():
    naive = NOW.replace(tzinfo=None)
    assert window_bounds(Window.TODAY, naive) == window_bounds(Window.TODAY, NOW)


def test_bounds_are_inclusive():
    bounds = window_bounds(Window.TODAY, NOW)
    assert in_window(bounds[0], bounds)
    assert in_window(bounds[1], bounds)
    assert not in_window(bounds[1] + ONE_US, bounds)
    assert not in_window(NOW - timedelta(days=1), bounds)
