from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..common.listing import CalendarFilter, ListQuery
from .model import Expense, ExpenseTotals


class ExpenseRepository(Protocol):
    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def create_expense(self, *, title: str, amount: Decimal) -> int:
        raise NotImplementedError

    def update_expense(self, expense_id: int, *, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, expense_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        period: CalendarFilter,
    ) -> Tuple[Sequence[Expense], int]:
        raise NotImplementedError

    def totals(
        self,
        *,
        search_pattern: Optional[str],
        created_after: Optional[datetime],
        period: CalendarFilter,
    ) -> ExpenseTotals:
        raise NotImplementedError
