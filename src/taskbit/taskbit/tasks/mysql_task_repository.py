from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import PaperType, TaskStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, to_decimal
from .model import Task, TaskFilter, TaskTotals, check_amount_covers_paid
from .repository import TaskRepository

# Paid = sum of COMPLETED payments per task.
_PAID_JOIN = """
    LEFT JOIN (
        SELECT task_id, SUM(amount) AS paid
        FROM payments
        WHERE status='COMPLETED'
        GROUP BY task_id
    ) p ON p.task_id = t.task_id
    LEFT JOIN users u ON u.user_id = t.assigned_to_id
"""

_SELECT = f"""
    SELECT t.task_id, t.title, t.description, t.link, t.note, t.amount, t.status, t.paper_type,
           t.assigned_to_id, t.created_by_id, t.start_date, t.duration, t.is_deleted,
           t.created_at, t.updated_at,
           u.name AS assignee_name, u.email AS assignee_email,
           COALESCE(p.paid, 0) AS paid
    FROM tasks t
    {_PAID_JOIN}
"""

_UPDATABLE = {
    "title",
    "description",
    "link",
    "note",
    "amount",
    "status",
    "paper_type",
    "assigned_to_id",
    "start_date",
    "duration",
}


def _row_to_task(r: dict) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        title=r["title"],
        description=r.get("description"),
        link=r.get("link"),
        note=r.get("note"),
        amount=to_decimal(r["amount"]),
        status=TaskStatus(r["status"]),
        paper_type=PaperType(r["paper_type"]) if r.get("paper_type") else None,
        assigned_to_id=int(r["assigned_to_id"]) if r.get("assigned_to_id") is not None else None,
        assignee_name=r.get("assignee_name"),
        assignee_email=r.get("assignee_email"),
        created_by_id=int(r["created_by_id"]) if r.get("created_by_id") is not None else None,
        start_date=r.get("start_date"),
        duration=r.get("duration"),
        is_deleted=bool(r.get("is_deleted")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        paid=to_decimal(r.get("paid")),
    )


def _db_value(value):
    return value.value if isinstance(value, (TaskStatus, PaperType)) else value


def _assignments(fields: dict) -> Tuple[str, list]:
    items = [(k, _db_value(v)) for k, v in fields.items() if k in _UPDATABLE]
    return ", ".join(f"{k}=%s" for k, _ in items), [v for _, v in items]


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.task_id=%s AND t.is_deleted=0", (int(task_id),))
            row = fetchone(cur)
            return _row_to_task(row) if row else None

    def create_task(
        self,
        *,
        title: str,
        description: Optional[str],
        link: Optional[str],
        amount: Decimal,
        status: TaskStatus,
        paper_type: Optional[PaperType],
        assigned_to_id: Optional[int],
        created_by_id: Optional[int],
        start_date: Optional[date],
        duration: Optional[datetime],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks
                    (title, description, link, amount, status, paper_type, assigned_to_id, created_by_id, start_date, duration)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    title,
                    description,
                    link,
                    amount,
                    status.value,
                    paper_type.value if paper_type else None,
                    assigned_to_id,
                    created_by_id,
                    start_date,
                    duration,
                ),
            )
            return int(cur.lastrowid)

    def update_task(self, task_id: int, *, fields: dict) -> bool:
        assignments, values = _assignments(fields)
        if not values:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE tasks SET {assignments} WHERE task_id=%s AND is_deleted=0",
                tuple(values + [int(task_id)]),
            )
            return True

    def update_checked(self, task_id: int, *, fields: dict) -> None:
        assignments, values = _assignments(fields)
        if not values:
            return

        with db_cursor(self._conn_factory) as (_, cur):
            # Payment writes take the same row lock.
            cur.execute("SELECT amount FROM tasks WHERE task_id=%s AND is_deleted=0 FOR UPDATE", (int(task_id),))
            if not fetchone(cur):
                raise NotFoundError("Task not found")
            if "amount" in fields:
                cur.execute(
                    "SELECT SUM(amount) AS paid FROM payments WHERE task_id=%s AND status='COMPLETED'",
                    (int(task_id),),
                )
                check_amount_covers_paid(fields["amount"], to_decimal((fetchone(cur) or {}).get("paid")))
            cur.execute(
                f"UPDATE tasks SET {assignments} WHERE task_id=%s AND is_deleted=0",
                tuple(values + [int(task_id)]),
            )

    def soft_delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET is_deleted=1 WHERE task_id=%s AND is_deleted=0", (int(task_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        filters: TaskFilter,
        assigned_to_id: Optional[int] = None,
    ) -> Tuple[Sequence[Task], int]:
        where = WhereBuilder("t.is_deleted=0")
        if query.status is not None:
            where.add("t.status=%s", query.status.value)
        if assigned_to_id is not None:
            where.add("t.assigned_to_id=%s", int(assigned_to_id))
        if filters.payment_status == "paid":
            where.add("t.amount - COALESCE(p.paid, 0) <= 0")
        elif filters.payment_status == "due":
            where.add("t.amount - COALESCE(p.paid, 0) > 0")
        if filters.paper_type is not None:
            where.add("t.paper_type=%s", filters.paper_type.value)
        where.add_period("t.duration", filters.due)
        where.add_period("t.created_at", filters.created)
        where.add_search(("t.title", "t.description"), query.search_pattern)
        if created_after is not None:
            where.add("t.created_at >= %s", created_after)
        clause, params = where.build()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM tasks t {_PAID_JOIN} WHERE {clause}", tuple(params))
            count = int(fetchone(cur)["n"])
            cur.execute(
                f"{_SELECT} WHERE {clause} ORDER BY t.created_at DESC, t.task_id DESC LIMIT %s OFFSET %s",
                tuple(params + [query.limit, query.offset]),
            )
            return [_row_to_task(r) for r in fetchall(cur)], count

    def totals(self, *, assigned_to_id: Optional[int] = None) -> TaskTotals:
        where = WhereBuilder("t.is_deleted=0")
        if assigned_to_id is not None:
            where.add("t.assigned_to_id=%s", int(assigned_to_id))
        clause, params = where.build()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS n, SUM(t.amount) AS amount, SUM(COALESCE(p.paid, 0)) AS paid
                FROM tasks t {_PAID_JOIN}
                WHERE {clause}
                """,
                tuple(params),
            )
            row = fetchone(cur) or {}
            cur.execute(
                f"SELECT t.status, COUNT(*) AS n FROM tasks t WHERE {clause} GROUP BY t.status",
                tuple(params),
            )
            by_status = {s.value: 0 for s in TaskStatus}
            for r in fetchall(cur):
                by_status[r["status"]] = int(r["n"])

        return TaskTotals(
            total_tasks=int(row.get("n") or 0),
            total_amount=to_decimal(row.get("amount")),
            total_paid=to_decimal(row.get("paid")),
            by_status=by_status,
        )
