from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import PaperType, TaskStatus
from .model import Task, TaskFilter, TaskTotals


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        """Non-deleted task with its paid total, or None."""

        raise NotImplementedError

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
        raise NotImplementedError

    def update_task(self, task_id: int, *, fields: dict) -> bool:
        raise NotImplementedError

    def update_checked(self, task_id: int, *, fields: dict) -> None:
        """Update a task; a new `amount` is checked against its COMPLETED payments.

        Check and write happen atomically, so a concurrent payment cannot leave
        the task overpaid. Raises NotFoundError or ValidationError.
        """

        raise NotImplementedError

    def soft_delete(self, task_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        filters: TaskFilter,
        assigned_to_id: Optional[int] = None,
    ) -> Tuple[Sequence[Task], int]:
        raise NotImplementedError

    def totals(self, *, assigned_to_id: Optional[int] = None) -> TaskTotals:
        raise NotImplementedError
