from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.listing import CalendarFilter, parse_filter_enum
from ..core.enums import PaperType, TaskStatus
from ..core.exceptions import ValidationError

STATUS_ORDER = (
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.SUBMITTED,
    TaskStatus.COMPLETED,
)


@dataclass(frozen=True)
class Task:
    """Domain entity: Task. `paid` is the sum of its COMPLETED payments."""

    task_id: int
    title: str
    amount: Decimal
    status: TaskStatus
    paper_type: Optional[PaperType] = None
    description: Optional[str] = None
    link: Optional[str] = None
    note: Optional[str] = None
    assigned_to_id: Optional[int] = None
    assignee_name: Optional[str] = None
    assignee_email: Optional[str] = None
    created_by_id: Optional[int] = None
    start_date: Optional[date] = None
    duration: Optional[datetime] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid: Decimal = Decimal("0.00")

    @property
    def remaining(self) -> Decimal:
        return self.amount - self.paid

    def to_dict(self) -> dict:
        return {
            "id": self.task_id,
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "note": self.note,
            "amount": self.amount,
            "paid": self.paid,
            "remaining": self.remaining,
            "status": self.status,
            "paperType": self.paper_type,
            "assignedToId": self.assigned_to_id,
            "assignedTo": (
                {"id": self.assigned_to_id, "name": self.assignee_name, "email": self.assignee_email}
                if self.assigned_to_id
                else None
            ),
            "createdById": self.created_by_id,
            "startDate": self.start_date,
            "duration": self.duration,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }



def check_amount_covers_paid(amount: Decimal, paid: Decimal) -> None:
    """A task amount may not drop below what its COMPLETED payments already cover."""
    if amount < paid:
        raise ValidationError("Amount cannot be lower than the amount already paid")


PAYMENT_STATUS_FILTERS = ("paid", "due")


def parse_payment_status(value) -> Optional[str]:
    raw = (value or "").strip().lower()
    return raw if raw in PAYMENT_STATUS_FILTERS else None


@dataclass(frozen=True)
class TaskFilter:
    """Task-only listing filters.

    `payment_status` is "paid" (nothing left to pay) or "due". `due` narrows the
    due date (`duration`), `created` the creation time.
    """

    payment_status: Optional[str] = None
    paper_type: Optional[PaperType] = None
    due: CalendarFilter = field(default_factory=CalendarFilter)
    created: CalendarFilter = field(default_factory=CalendarFilter)

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "TaskFilter":
        return cls(
            payment_status=parse_payment_status(args.get("payment_status")),
            paper_type=parse_filter_enum(args.get("paper_type"), PaperType),
            due=CalendarFilter.from_args(args, day_key="due_date", month_key="due_month", year_key="due_year"),
            created=CalendarFilter.from_args(
                args, day_key="task_create", month_key="task_create_month", year_key="task_create_year"
            ),
        )

    def matches(self, task: Task) -> bool:
        if self.payment_status == "paid" and task.remaining > 0:
            return False
        if self.payment_status == "due" and task.remaining <= 0:
            return False
        if self.paper_type is not None and task.paper_type != self.paper_type:
            return False
        return self.due.matches(task.duration) and self.created.matches(task.created_at)


@dataclass(frozen=True)
class TaskTotals:
    total_tasks: int
    total_amount: Decimal
    total_paid: Decimal
    by_status: dict

    @property
    def total_due(self) -> Decimal:
        return max(self.total_amount - self.total_paid, Decimal("0.00"))

    def to_dict(self) -> dict:
        return {
            "totalTasks": self.total_tasks,
            "totalAmount": self.total_amount,
            "totalPaid": self.total_paid,
            "totalDue": self.total_due,
            "byStatus": dict(self.by_status),
        }
