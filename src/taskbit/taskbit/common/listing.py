"""Listing query parsing and page envelopes shared by every entity listing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Type

from ..core.constants import MAX_FILTER_YEAR, PAGE_SIZE
from ..core.enums import DateBucket
from .datetime_utils import bucket_lower_bound, month_range, year_range
from .validators import optional_int_in_range


def like_pattern(term: str) -> Optional[str]:
    """Case-insensitive LIKE pattern for `term` (None when there is nothing to search)."""
    term = (term or "").strip()
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


def _parse_page(value) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page > 0 else 1


def parse_filter_enum(value, enum_cls: Optional[Type[Enum]]):
    """Enum filter value, or None for missing, `ALL` or unknown values."""
    raw = (value or "").strip().upper()
    if not enum_cls or not raw or raw == "ALL":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        # Unknown values behave like ALL.
        return None


def _parse_bucket(value) -> DateBucket:
    raw = (value or "").strip().lower()
    try:
        return DateBucket(raw) if raw else DateBucket.ALL
    except ValueError:
        return DateBucket.ALL


@dataclass(frozen=True)
class ListQuery:
    search: str = ""
    status: Optional[Enum] = None
    bucket: DateBucket = DateBucket.ALL
    page: int = 1
    limit: int = PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def search_pattern(self) -> Optional[str]:
        return like_pattern(self.search)

    def created_after(self, *, now: Optional[datetime] = None) -> Optional[datetime]:
        return bucket_lower_bound(self.bucket, now=now)

    @classmethod
    def from_args(cls, args: Mapping[str, Any], *, status_enum: Optional[Type[Enum]] = None) -> "ListQuery":
        return cls(
            search=(args.get("search") or "").strip(),
            status=parse_filter_enum(args.get("status"), status_enum),
            bucket=_parse_bucket(args.get("date")),
            page=_parse_page(args.get("page")),
        )



def _parse_day(value) -> Optional[date]:
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        day = datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None
    return day if day.year <= MAX_FILTER_YEAR else None


@dataclass(frozen=True)
class CalendarFilter:
    """Narrows a timestamp to one day, one month, one year or a month of any year.

    The most specific input wins: day, then month with year, then year, then month alone.
    Unparseable values are ignored like the other listing filters.
    """

    day: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None

    @classmethod
    def from_args(
        cls,
        args: Mapping[str, Any],
        *,
        month_key: str,
        year_key: str,
        day_key: Optional[str] = None,
    ) -> "CalendarFilter":
        day = _parse_day(args.get(day_key)) if day_key else None
        if day is not None:
            return cls(day=day)
        return cls(
            month=optional_int_in_range(args.get(month_key), 1, 12),
            year=optional_int_in_range(args.get(year_key), 1, MAX_FILTER_YEAR),
        )

    @property
    def is_empty(self) -> bool:
        return self.day is None and self.month is None and self.year is None

    def bounds(self) -> Optional[tuple[datetime, datetime]]:
        """[start, end) for a day, a month of a year or a year; None otherwise."""
        if self.day is not None:
            start = datetime.combine(self.day, time.min)
            return start, start + timedelta(days=1)
        if self.year is not None and self.month is not None:
            return month_range(self.year, self.month)
        if self.year is not None:
            return year_range(self.year)
        return None

    def matches(self, value: Optional[datetime]) -> bool:
        if self.is_empty:
            return True
        if value is None:
            return False
        bounds = self.bounds()
        if bounds is not None:
            return bounds[0] <= value < bounds[1]
        return value.month == self.month


@dataclass(frozen=True)
class Page:
    data: Sequence[Any] = field(default_factory=list)
    count: int = 0
    page: int = 1
    limit: int = PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.count / self.limit) if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "data": list(self.data),
            "meta": {
                "count": int(self.count),
                "page": int(self.page),
                "limit": int(self.limit),
                "totalPages": self.total_pages,
            },
        }
