from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import month_range, now_local, year_range
from ..common.validators import optional_int_in_range
from ..core.constants import MAX_FILTER_YEAR
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


class DashboardService:
    """Use case: admin financial summary, optionally narrowed to one month or year."""

    def __init__(self, dashboard: DashboardRepository):
        self._dashboard = dashboard

    def summary(self, *, current_role: Role, args: Mapping[str, Any], now: Optional[datetime] = None) -> dict:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

        month = optional_int_in_range(args.get("month"), 1, 12)
        year = optional_int_in_range(args.get("year"), 1, MAX_FILTER_YEAR)
        if month is not None and year is None:
            year = (now or now_local()).year

        start = end = None
        if month is not None:
            start, end = month_range(year, month)
        elif year is not None:
            start, end = year_range(year)

        logger.debug("Dashboard summary for month=%s year=%s", month, year)
        return self._dashboard.figures(start=start, end=end, month=month, year=year).to_summary()
