from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..common.listing import ListQuery
from ..core.enums import PaymentType, SalaryStatus, SalaryType
from ..core.exceptions import DuplicateSalaryError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, to_decimal
from .model import Salary, SalaryFilter, SalaryTotals
from .repository import SalaryRepository

_FROM = "FROM salaries s LEFT JOIN users u ON u.user_id = s.user_id"

_SELECT = f"""
    SELECT s.salary_id, s.user_id, s.amount, s.month, s.year, s.salary_type, s.status,
           s.payment_type, s.reference_number, s.note, s.created_at, s.updated_at,
           u.name AS user_name, u.email AS user_email
    {_FROM}
"""

_UPDATABLE = {"amount", "salary_type", "status", "payment_type", "reference_number", "note"}


def _row_to_salary(r: dict) -> Salary:
    return Salary(
        salary_id=int(r["salary_id"]),
        user_id=int(r["user_id"]),
        amount=to_decimal(r["amount"]),
        month=int(r["month"]),
        year=int(r["year"]),
        salary_type=SalaryType(r["salary_type"]),
        status=SalaryStatus(r["status"]),
        payment_type=PaymentType(r["payment_type"]) if r.get("payment_type") else None,
        reference_number=r.get("reference_number"),
        note=r.get("note"),
        user_name=r.get("user_name"),
        user_email=r.get("user_email"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _is_duplicate_monthly(err: IntegrityError) -> bool:
    # uq_salaries_monthly is the only unique key on salaries and covers MONTHLY rows only.
    return err.errno == errorcode.ER_DUP_ENTRY


def _db_value(value):
    return value.value if isinstance(value, (SalaryStatus, SalaryType, PaymentType)) else value


def _filtered(filters: SalaryFilter, user_id: Optional[int]) -> WhereBuilder:
    where = WhereBuilder()
    if filters.salary_type is not None:
        where.add("s.salary_type=%s", filters.salary_type.value)
    if filters.payment_type is not None:
        where.add("s.payment_type=%s", filters.payment_type.value)
    if filters.month is not None:
        where.add("s.month=%s", filters.month)
    if filters.year is not None:
        where.add("s.year=%s", filters.year)
    if user_id is not None:
        where.add("s.user_id=%s", int(user_id))
    return where


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE s.salary_id=%s", (int(salary_id),))
            row = fetchone(cur)
            return _row_to_salary(row) if row else None

    def find_monthly(self, *, user_id: int, month: int, year: int, exclude_id: Optional[int] = None) -> Optional[Salary]:
        sql = f"{_SELECT} WHERE s.user_id=%s AND s.month=%s AND s.year=%s AND s.salary_type='MONTHLY'"
        params: list[object] = [int(user_id), int(month), int(year)]
        if exclude_id is not None:
            sql += " AND s.salary_id<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            row = fetchone(cur)
            return _row_to_salary(row) if row else None

    def create_salary(
        self,
        *,
        user_id: int,
        amount: Decimal,
        month: int,
        year: int,
        salary_type: SalaryType,
        status: SalaryStatus,
        payment_type: Optional[PaymentType],
        reference_number: Optional[str],
        note: Optional[str],
    ) -> int:
        params = (
            int(user_id),
            amount,
            int(month),
            int(year),
            salary_type.value,
            status.value,
            payment_type.value if payment_type else None,
            reference_number,
            note,
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO salaries
                        (user_id, amount, month, year, salary_type, status, payment_type, reference_number, note)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    params,
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if _is_duplicate_monthly(e):
                raise DuplicateSalaryError("Monthly salary for this month already exists for this user") from e
            raise

    def update_salary(self, salary_id: int, *, fields: dict) -> bool:
        items = [(k, _db_value(v)) for k, v in fields.items() if k in _UPDATABLE]
        if not items:
            return False
        assignments = ", ".join(f"{k}=%s" for k, _ in items)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE salaries SET {assignments} WHERE salary_id=%s",
                    tuple([v for _, v in items] + [int(salary_id)]),
                )
                return True
        except IntegrityError as e:
            if _is_duplicate_monthly(e):
                raise DuplicateSalaryError("Monthly salary for this month already exists for this user") from e
            raise

    def delete(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salaries WHERE salary_id=%s", (int(salary_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        filters: SalaryFilter,
        user_id: Optional[int] = None,
    ) -> Tuple[Sequence[Salary], int]:
        where = _filtered(filters, user_id)
        if query.status is not None:
            where.add("s.status=%s", query.status.value)
        where.add_search(("u.name", "s.reference_number"), query.search_pattern)
        if created_after is not None:
            where.add("s.created_at >= %s", created_after)
        clause, params = where.build()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n {_FROM} WHERE {clause}", tuple(params))
            count = int(fetchone(cur)["n"])
            cur.execute(
                f"{_SELECT} WHERE {clause} ORDER BY s.created_at DESC, s.salary_id DESC LIMIT %s OFFSET %s",
                tuple(params + [query.limit, query.offset]),
            )
            return [_row_to_salary(r) for r in fetchall(cur)], count

    def totals(
        self,
        *,
        status: Optional[SalaryStatus],
        filters: SalaryFilter,
        user_id: Optional[int] = None,
    ) -> SalaryTotals:
        clause, params = _filtered(filters, user_id).build()
        by_status = {s.value: {"count": 0, "amount": Decimal("0.00")} for s in SalaryStatus}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT s.status, COUNT(*) AS n, SUM(s.amount) AS amount {_FROM} WHERE {clause} GROUP BY s.status",
                tuple(params),
            )
            for r in fetchall(cur):
                by_status[r["status"]] = {"count": int(r["n"]), "amount": to_decimal(r["amount"])}
        return SalaryTotals(by_status=by_status, status=status)
