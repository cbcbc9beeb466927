from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import PaymentStatus, PaymentType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, to_decimal
from .model import Payment, PaymentTotals, check_remaining
from .repository import PaymentRepository

_FROM = """
    FROM payments pm
    JOIN tasks t ON t.task_id = pm.task_id AND t.is_deleted = 0
    LEFT JOIN users u ON u.user_id = pm.user_id
"""

_SELECT = f"""
    SELECT pm.payment_id, pm.task_id, pm.user_id, pm.payment_type, pm.status, pm.amount,
           pm.reference_number, pm.created_at, pm.updated_at,
           t.title AS task_title, u.name AS user_name, u.email AS user_email
    {_FROM}
"""

_UPDATABLE = {"payment_type", "status", "amount", "reference_number", "user_id"}


def _row_to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        task_id=int(r["task_id"]),
        user_id=int(r["user_id"]),
        payment_type=PaymentType(r["payment_type"]),
        status=PaymentStatus(r["status"]),
        amount=to_decimal(r["amount"]),
        reference_number=r.get("reference_number"),
        task_title=r.get("task_title"),
        user_name=r.get("user_name"),
        user_email=r.get("user_email"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _db_value(value):
    return value.value if isinstance(value, (PaymentStatus, PaymentType)) else value


def _lock_task(cur, task_id: int) -> Decimal:
    cur.execute("SELECT amount FROM tasks WHERE task_id=%s AND is_deleted=0 FOR UPDATE", (int(task_id),))
    row = fetchone(cur)
    if not row:
        raise NotFoundError("Task not found")
    return to_decimal(row["amount"])


def _completed_total(cur, task_id: int, *, exclude_payment_id: Optional[int] = None) -> Decimal:
    sql = "SELECT SUM(amount) AS paid FROM payments WHERE task_id=%s AND status='COMPLETED'"
    params: list[object] = [int(task_id)]
    if exclude_payment_id is not None:
        sql += " AND payment_id<>%s"
        params.append(int(exclude_payment_id))
    cur.execute(sql, tuple(params))
    return to_decimal((fetchone(cur) or {}).get("paid"))


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE pm.payment_id=%s", (int(payment_id),))
            row = fetchone(cur)
            return _row_to_payment(row) if row else None

    def create_checked(
        self,
        *,
        task_id: int,
        user_id: int,
        payment_type: PaymentType,
        status: PaymentStatus,
        amount: Decimal,
        reference_number: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            task_amount = _lock_task(cur, task_id)
            check_remaining(task_amount, _completed_total(cur, task_id), amount)
            cur.execute(
                """
                INSERT INTO payments (task_id, user_id, payment_type, status, amount, reference_number)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (int(task_id), int(user_id), payment_type.value, status.value, amount, reference_number),
            )
            return int(cur.lastrowid)

    def update_checked(self, payment_id: int, *, fields: dict) -> None:
        items = [(k, _db_value(v)) for k, v in fields.items() if k in _UPDATABLE]
        if not items:
            return

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT task_id, amount FROM payments WHERE payment_id=%s", (int(payment_id),))
            current = fetchone(cur)
            if not current:
                raise NotFoundError("Payment not found")

            task_id = int(current["task_id"])
            task_amount = _lock_task(cur, task_id)
            amount = fields.get("amount", to_decimal(current["amount"]))
            check_remaining(task_amount, _completed_total(cur, task_id, exclude_payment_id=payment_id), amount)

            assignments = ", ".join(f"{k}=%s" for k, _ in items)
            cur.execute(
                f"UPDATE payments SET {assignments} WHERE payment_id=%s",
                tuple([v for _, v in items] + [int(payment_id)]),
            )

    def delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        user_id: Optional[int] = None,
    ) -> Tuple[Sequence[Payment], int]:
        where = WhereBuilder()
        if query.status is not None:
            where.add("pm.status=%s", query.status.value)
        if user_id is not None:
            where.add("pm.user_id=%s", int(user_id))
        where.add_search(("pm.reference_number", "t.title"), query.search_pattern)
        if created_after is not None:
            where.add("pm.created_at >= %s", created_after)
        clause, params = where.build()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n {_FROM} WHERE {clause}", tuple(params))
            count = int(fetchone(cur)["n"])
            cur.execute(
                f"{_SELECT} WHERE {clause} ORDER BY pm.created_at DESC, pm.payment_id DESC LIMIT %s OFFSET %s",
                tuple(params + [query.limit, query.offset]),
            )
            return [_row_to_payment(r) for r in fetchall(cur)], count

    def totals(self, *, user_id: Optional[int] = None) -> PaymentTotals:
        where = WhereBuilder()
        if user_id is not None:
            where.add("pm.user_id=%s", int(user_id))
        clause, params = where.build()

        by_status = {s.value: {"count": 0, "amount": Decimal("0.00")} for s in PaymentStatus}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT pm.status, COUNT(*) AS n, SUM(pm.amount) AS amount {_FROM} WHERE {clause} GROUP BY pm.status",
                tuple(params),
            )
            for r in fetchall(cur):
                by_status[r["status"]] = {"count": int(r["n"]), "amount": to_decimal(r["amount"])}
        return PaymentTotals(by_status=by_status)
