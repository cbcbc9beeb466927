from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, to_decimal
from .model import DashboardFigures
from .repository import DashboardRepository


def _by_status(rows) -> dict:
    return {r["status"]: {"count": int(r["n"]), "amount": to_decimal(r["amount"])} for r in rows}


def _created_between(where: WhereBuilder, column: str, start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None:
        where.add(f"{column} >= %s", start)
    if end is not None:
        where.add(f"{column} < %s", end)


class MySQLDashboardRepository(DashboardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def figures(
        self,
        *,
        start: Optional[datetime],
        end: Optional[datetime],
        month: Optional[int],
        year: Optional[int],
    ) -> DashboardFigures:
        payments = WhereBuilder("t.is_deleted=0")
        _created_between(payments, "pm.created_at", start, end)
        expenses = WhereBuilder()
        _created_between(expenses, "created_at", start, end)
        salaries = WhereBuilder()
        if month is not None:
            salaries.add("month=%s", month)
        if year is not None:
            salaries.add("year=%s", year)

        with db_cursor(self._conn_factory) as (_, cur):
            clause, params = payments.build()
            cur.execute(
                f"""
                SELECT pm.status, COUNT(*) AS n, SUM(pm.amount) AS amount
                FROM payments pm JOIN tasks t ON t.task_id = pm.task_id
                WHERE {clause}
                GROUP BY pm.status
                """,
                tuple(params),
            )
            payment_rows = _by_status(fetchall(cur))

            clause, params = salaries.build()
            cur.execute(
                f"SELECT status, COUNT(*) AS n, SUM(amount) AS amount FROM salaries WHERE {clause} GROUP BY status",
                tuple(params),
            )
            salary_rows = _by_status(fetchall(cur))

            clause, params = expenses.build()
            cur.execute(f"SELECT COUNT(*) AS n, SUM(amount) AS amount FROM expenses WHERE {clause}", tuple(params))
            row = fetchone(cur) or {}

        return DashboardFigures(
            payments=payment_rows,
            salaries=salary_rows,
            expense_count=int(row.get("n") or 0),
            expense_amount=to_decimal(row.get("amount")),
            month=month,
            year=year,
        )
