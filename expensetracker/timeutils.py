"""Date handling for the API.

Every timestamp is interpreted in UTC and stored as a naive UTC datetime.
Incoming values with an offset are converted to UTC first; values without
one are taken to already be UTC.
"""
from calendar import monthrange
from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value):
    """Parse an ISO 8601 date or datetime into a naive UTC datetime.

    Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        # fromisoformat only accepts a trailing "Z" from 3.11 on
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def midday(value: datetime) -> datetime:
    return datetime.combine(value.date(), time(12, 0))


def month_bounds(value: datetime):
    """First and last instant of the calendar month containing ``value``."""
    last_day = monthrange(value.year, value.month)[1]
    first = datetime(value.year, value.month, 1)
    last = datetime.combine(date(value.year, value.month, last_day), time.max)
    return first, last


def shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` by whole calendar months, clamping the day to the target month."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def isoformat(value):
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"
