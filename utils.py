import calendar
from datetime import date, datetime, timezone
from typing import Optional

SINCE_FORMAT = "%Y-%m-%d"


def _parse_since(value: str) -> datetime:
    """Parse a YYYY-MM-DD date into the UTC midnight that starts it.

    :raises ValueError: If the value is not a valid date.
    """
    day = datetime.strptime(value.strip(), SINCE_FORMAT).date()
    return _start_of_day(day)


def _start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's last day."""
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def default_since(today: Optional[date] = None) -> str:
    """Default lower bound for an export: one month before today (UTC)."""
    if today is None:
        today = datetime.now(timezone.utc).date()
    return one_month_before(today).strftime(SINCE_FORMAT)
