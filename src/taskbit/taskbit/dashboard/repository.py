from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import DashboardFigures


class DashboardRepository(Protocol):
    def figures(
        self,
        *,
        start: Optional[datetime],
        end: Optional[datetime],
        month: Optional[int],
        year: Optional[int],
    ) -> DashboardFigures:
        """Payments/expenses narrowed by creation time in [start, end); salaries by their month/year."""

        raise NotImplementedError
