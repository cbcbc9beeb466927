from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.enums import DateBucket

# Fixed windows; months are approximated in days.
_BUCKET_WINDOWS = {
    DateBucket.LAST_DAY: timedelta(days=1),
    DateBucket.LAST_WEEK: timedelta(days=7),
    DateBucket.LAST_MONTH: timedelta(days=30),
    DateBucket.LAST_6_MONTHS: timedelta(days=182),
    DateBucket.LAST_YEAR: timedelta(days=365),
}


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def bucket_lower_bound(bucket: DateBucket, *, now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest creation time included by `bucket`, or None for `all`."""
    window = _BUCKET_WINDOWS.get(bucket)
    if window is None:
        return None
    return (now or now_local()) - window


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """[start, end) datetimes covering one calendar month."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def year_range(year: int) -> tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)
