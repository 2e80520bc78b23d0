"""Calendar windows for the task board filter.

``window_bounds`` is pure: the anchor instant and the timezone are
arguments, so callers (and tests) decide what "now" is.
"""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from verticals.tasks.models.schemas import Window

DEFAULT_WEEK_START = 6  # Sunday


def _start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def _end(next_start: datetime) -> datetime:
    return next_start - timedelta(microseconds=1)


def window_bounds(
    window: Window | str,
    now: datetime,
    tz: str | ZoneInfo = "UTC",
    week_start: int = DEFAULT_WEEK_START,
) -> tuple[datetime, datetime]:
    """Return the inclusive ``(start, end)`` of the window containing ``now``.

    - today: local midnight to 23:59:59.999999
    - this_week: the calendar week beginning on ``week_start``
      (``datetime.weekday()`` numbering, 6 = Sunday)
    - this_month: first to last day of the month

    Naive ``now`` values are taken to be UTC. Bounds are timezone-aware in
    ``tz``.
    """
    window = Window(window)
    zone = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(zone)
    today = _start_of_day(local)

    if window is Window.TODAY:
        start = today
        next_start = start + timedelta(days=1)
    elif window is Window.THIS_WEEK:
        offset = (local.weekday() - week_start) % 7
        start = today - timedelta(days=offset)
        next_start = start + timedelta(days=7)
    else:
        start = today.replace(day=1)
        if start.month == 12:
            next_start = start.replace(year=start.year + 1, month=1)
        else:
            next_start = start.replace(month=start.month + 1)

    return start, _end(next_start)


def to_utc(bounds: tuple[datetime, datetime]) -> tuple[datetime, datetime]:
    start, end = bounds
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def in_window(moment: datetime, bounds: tuple[datetime, datetime]) -> bool:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    start, end = bounds
    return start <= moment <= end
