from datetime import datetime, time, timezone, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salepdv.core.config import settings

try:
    LOCAL_TZ = ZoneInfo(settings.APP_TIMEZONE)
except ZoneInfoNotFoundError:
    # fallback to a fixed -03:00 offset if tz data isn't installed
    LOCAL_TZ = timezone(timedelta(hours=-3))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_local(dt: datetime | None) -> datetime | None:
    """Convert a stored timestamp to the local timezone.

    Timestamps are written in UTC; SQLite hands them back naive, so a naive
    value is read as UTC before converting.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(LOCAL_TZ)


def local_today():
    return utcnow().astimezone(LOCAL_TZ).date()


def local_day_range_to_utc(date_str: str):
    """Given a local date string (YYYY-MM-DD or ISO datetime), return
    a tuple (start_utc, end_utc) covering that local day.

    Examples:
      '2026-01-11' -> 2026-01-11 00:00:00-03:00 .. 23:59:59.999999-03:00 in UTC
      '2026-01-11T10:00:00' -> start == end == that local instant in UTC
    Returns (None, None) when the string can't be parsed.
    """
    if not date_str:
        return None, None
    try:
        d = datetime.fromisoformat(date_str)
    except ValueError:
        return None, None
    if len(date_str) == 10:
        start_local = datetime.combine(d.date(), time.min)
        end_local = datetime.combine(d.date(), time.max)
    else:
        start_local = end_local = d

    def _aware(value):
        if value.tzinfo is None:
            return value.replace(tzinfo=LOCAL_TZ)
        return value.astimezone(LOCAL_TZ)

    return _aware(start_local).astimezone(timezone.utc), _aware(end_local).astimezone(timezone.utc)
