from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Optional

from ..common.listing import CalendarFilter, ListQuery, Page
from ..common.validators import parse_amount, require_title
from ..core.constants import MIN_TITLE_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .repository import ExpenseRepository

logger = logging.getLogger(__name__)


class ExpenseService:
    def __init__(self, expenses: ExpenseRepository):
        self._expenses = expenses

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

    def create_expense(self, *, current_role: Role, data: Mapping) -> int:
        self._require_admin(current_role)
        title = require_title(data.get("title"), "Title", MIN_TITLE_LENGTH)
        amount = parse_amount(data.get("amount"))
        expense_id = self._expenses.create_expense(title=title, amount=amount)
        logger.info("Created expense %s (%s)", expense_id, amount)
        return expense_id

    def update_expense(self, *, current_role: Role, expense_id: int, data: Mapping) -> None:
        self._require_admin(current_role)
        if not self._expenses.get_by_id(expense_id):
            raise NotFoundError("Expense not found")

        fields: dict = {}
        if "title" in data:
            fields["title"] = require_title(data.get("title"), "Title", MIN_TITLE_LENGTH)
        if "amount" in data:
            fields["amount"] = parse_amount(data.get("amount"))
        if not fields:
            raise ValidationError("Nothing to update")
        self._expenses.update_expense(expense_id, fields=fields)

    def delete_expense(self, *, current_role: Role, expense_id: int) -> None:
        self._require_admin(current_role)
        if not self._expenses.delete(expense_id):
            raise NotFoundError("Expense not found")
        logger.info("Deleted expense %s", expense_id)

    def list_expenses(
        self,
        query: ListQuery,
        period: Optional[CalendarFilter] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Page:
        rows, count = self._expenses.list_page(
            query=query,
            created_after=query.created_after(now=now),
            period=period or CalendarFilter(),
        )
        return Page(data=[e.to_dict() for e in rows], count=count, page=query.page, limit=query.limit)

    def calculation(
        self,
        query: ListQuery,
        period: Optional[CalendarFilter] = None,
        *,
        now: Optional[datetime] = None,
    ) -> dict:
        """Count, total and average over the same filters as the listing."""
        totals = self._expenses.totals(
            search_pattern=query.search_pattern,
            created_after=query.created_after(now=now),
            period=period or CalendarFilter(),
        )
        return totals.to_dict()
