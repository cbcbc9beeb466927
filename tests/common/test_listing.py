from __future__ import annotations

from datetime import date, datetime, timedelta

from taskbit.common.datetime_utils import bucket_lower_bound, month_range
from taskbit.common.listing import CalendarFilter, ListQuery, Page, like_pattern
from taskbit.core.enums import DateBucket, TaskStatus


def test_from_args_defaults():
    q = ListQuery.from_args({}, status_enum=TaskStatus)
    assert q.search == ""
    assert q.status is None
    assert q.bucket == DateBucket.ALL
    assert q.page == 1
    assert q.limit == 10
    assert q.offset == 0


def test_from_args_parses_values():
    q = ListQuery.from_args(
        {"search": "  Blog ", "status": "in_progress", "date": "last-week", "page": "3"},
        status_enum=TaskStatus,
    )
    assert q.search == "Blog"
    assert q.status == TaskStatus.IN_PROGRESS
    assert q.bucket == DateBucket.LAST_WEEK
    assert q.page == 3
    assert q.offset == 20


def test_invalid_values_fall_back_to_defaults():
    q = ListQuery.from_args({"status": "BOGUS", "date": "yesterday", "page": "-2"}, status_enum=TaskStatus)
    assert q.status is None
    assert q.bucket == DateBucket.ALL
    assert q.page == 1

    assert ListQuery.from_args({"page": "abc"}).page == 1
    assert ListQuery.from_args({"status": "ALL"}, status_enum=TaskStatus).status is None


def test_total_pages_is_ceiling_of_count():
    assert Page(count=0).total_pages == 0
    assert Page(count=10).total_pages == 1
    assert Page(count=11).total_pages == 2
    assert Page(data=[1], count=21, page=3).to_dict() == {
        "data": [1],
        "meta": {"count": 21, "page": 3, "limit": 10, "totalPages": 3},
    }


def test_like_pattern_escapes_wildcards():
    assert like_pattern("") is None
    assert like_pattern("   ") is None
    assert like_pattern("Hello") == "%hello%"
    assert like_pattern("50%_off") == "%50\\%\\_off%"


def test_bucket_lower_bounds(fixed_now):
    assert bucket_lower_bound(DateBucket.ALL, now=fixed_now) is None
    assert bucket_lower_bound(DateBucket.LAST_DAY, now=fixed_now) == fixed_now - timedelta(days=1)
    assert bucket_lower_bound(DateBucket.LAST_WEEK, now=fixed_now) == fixed_now - timedelta(days=7)
    assert bucket_lower_bound(DateBucket.LAST_MONTH, now=fixed_now) == fixed_now - timedelta(days=30)
    assert bucket_lower_bound(DateBucket.LAST_YEAR, now=fixed_now) == fixed_now - timedelta(days=365)


def test_month_range_wraps_december():
    assert month_range(2026, 12) == (datetime(2026, 12, 1), datetime(2027, 1, 1))
    assert month_range(2026, 2) == (datetime(2026, 2, 1), datetime(2026, 3, 1))


def test_calendar_filter_prefers_the_most_specific_input():
    args = {"due_date": "2026-03-20", "due_month": "2", "due_year": "2025"}
    f = CalendarFilter.from_args(args, month_key="due_month", year_key="due_year", day_key="due_date")
    assert f == CalendarFilter(day=date(2026, 3, 20))

    f = CalendarFilter.from_args({"month": "2", "year": "2025"}, month_key="month", year_key="year")
    assert f == CalendarFilter(month=2, year=2025)


def test_calendar_filter_ignores_bad_values():
    args = {"due_date": "9999-12-31", "due_month": "13", "due_year": "9999"}
    f = CalendarFilter.from_args(args, month_key="due_month", year_key="due_year", day_key="due_date")
    assert f.is_empty
    assert f.bounds() is None
    assert f.matches(None)


def test_calendar_filter_matches():
    assert CalendarFilter(month=3, year=2026).matches(datetime(2026, 3, 31, 23, 59))
    assert not CalendarFilter(month=3, year=2026).matches(datetime(2026, 4, 1))
    assert CalendarFilter(month=3).matches(datetime(2019, 3, 2))
    assert not CalendarFilter(year=2026).matches(None)
