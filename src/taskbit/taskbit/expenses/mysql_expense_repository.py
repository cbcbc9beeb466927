from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ..common.listing import CalendarFilter, ListQuery
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, to_decimal
from .model import Expense, ExpenseTotals
from .repository import ExpenseRepository

_COLUMNS = "expense_id, title, amount, created_at, updated_at"
_UPDATABLE = {"title", "amount"}


def _row_to_expense(r: dict) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        title=r["title"],
        amount=to_decimal(r["amount"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _where(search_pattern: Optional[str], created_after: Optional[datetime], period: CalendarFilter) -> WhereBuilder:
    where = WhereBuilder()
    where.add_search(("title",), search_pattern)
    if created_after is not None:
        where.add("created_at >= %s", created_after)
    return where.add_period("created_at", period)


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM expenses WHERE expense_id=%s", (int(expense_id),))
            row = fetchone(cur)
            return _row_to_expense(row) if row else None

    def create_expense(self, *, title: str, amount: Decimal) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO expenses (title, amount) VALUES (%s, %s)", (title, amount))
            return int(cur.lastrowid)

    def update_expense(self, expense_id: int, *, fields: dict) -> bool:
        items = [(k, v) for k, v in fields.items() if k in _UPDATABLE]
        if not items:
            return False
        assignments = ", ".join(f"{k}=%s" for k, _ in items)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE expenses SET {assignments} WHERE expense_id=%s",
                tuple([v for _, v in items] + [int(expense_id)]),
            )
            return True

    def delete(self, expense_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM expenses WHERE expense_id=%s", (int(expense_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        period: CalendarFilter,
    ) -> Tuple[Sequence[Expense], int]:
        clause, params = _where(query.search_pattern, created_after, period).build()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM expenses WHERE {clause}", tuple(params))
            count = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM expenses
                WHERE {clause}
                ORDER BY created_at DESC, expense_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [query.limit, query.offset]),
            )
            return [_row_to_expense(r) for r in fetchall(cur)], count

    def totals(
        self,
        *,
        search_pattern: Optional[str],
        created_after: Optional[datetime],
        period: CalendarFilter,
    ) -> ExpenseTotals:
        clause, params = _where(search_pattern, created_after, period).build()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n, SUM(amount) AS total FROM expenses WHERE {clause}", tuple(params))
            row = fetchone(cur) or {}
        return ExpenseTotals(total_expenses=int(row.get("n") or 0), total_amount=to_decimal(row.get("total")))
