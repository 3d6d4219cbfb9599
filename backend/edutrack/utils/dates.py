"""Date and timezone helpers.

Timestamps are stored as naive UTC. Calendar days (attendance dates and
session dates) are taken in a named timezone so that "today" follows the
campus clock rather than the server's.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = 'Asia/Kolkata'


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def naive_utc(moment: datetime) -> datetime:
    """Strip tzinfo after converting to UTC, for storage."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def local_date(moment: Optional[datetime] = None, tz_name: str = DEFAULT_TIMEZONE) -> date:
    """Calendar day of ``moment`` in ``tz_name``. Naive values are read as UTC."""
    moment = moment or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).date()


def parse_date(value: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` string."""
    return date.fromisoformat(value.strip())
