from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Optional

from ..common.listing import ListQuery, Page
from ..common.validators import (
    optional_text,
    parse_amount,
    parse_enum,
    parse_optional_date,
    parse_optional_datetime,
    parse_optional_enum,
    parse_positive_int,
    require_title,
)
from ..core.constants import MIN_TITLE_LENGTH
from ..core.enums import PaperType, Role, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import STATUS_ORDER, Task, TaskFilter
from .repository import TaskRepository

logger = logging.getLogger(__name__)

# Statuses an assignee may move their own task into.
ASSIGNEE_STATUSES = (TaskStatus.IN_PROGRESS, TaskStatus.SUBMITTED)


class TaskService:
    """Use case: admin task management, assignee delivery and listings."""

    def __init__(self, tasks: TaskRepository, users: UserRepository):
        self._tasks = tasks
        self._users = users

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

    def _get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _assignee_id(self, value) -> Optional[int]:
        if value is None or str(value).strip() == "":
            return None
        user_id = parse_positive_int(value, "Assignee")
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise ValidationError("Assignee not found")
        return user_id

    def get_task(self, task_id: int) -> Task:
        return self._get(task_id)

    def create_task(self, *, current_role: Role, current_user_id: int, data: Mapping) -> int:
        self._require_admin(current_role)

        title = require_title(data.get("title"), "Title", MIN_TITLE_LENGTH)
        amount = parse_amount(data.get("amount"))
        status = parse_enum(TaskStatus, data.get("status") or TaskStatus.PENDING.value, "Status")

        task_id = self._tasks.create_task(
            title=title,
            description=optional_text(data.get("description")),
            link=optional_text(data.get("link")),
            amount=amount,
            status=status,
            paper_type=parse_optional_enum(PaperType, data.get("paper_type"), "Paper type"),
            assigned_to_id=self._assignee_id(data.get("assigned_to_id")),
            created_by_id=current_user_id,
            start_date=parse_optional_date(data.get("start_date"), "Start date"),
            duration=parse_optional_datetime(data.get("duration"), "Duration"),
        )
        logger.info("Created task %s (%s)", task_id, amount)
        return task_id

    def update_task(self, *, current_role: Role, task_id: int, data: Mapping) -> None:
        self._require_admin(current_role)
        self._get(task_id)

        fields: dict = {}
        if "title" in data:
            fields["title"] = require_title(data.get("title"), "Title", MIN_TITLE_LENGTH)
        if "amount" in data:
            fields["amount"] = parse_amount(data.get("amount"))
        if data.get("status"):
            fields["status"] = parse_enum(TaskStatus, data["status"], "Status")
        if "paper_type" in data:
            fields["paper_type"] = parse_optional_enum(PaperType, data.get("paper_type"), "Paper type")
        for key in ("description", "link", "note"):
            if key in data:
                fields[key] = optional_text(data.get(key))
        if "assigned_to_id" in data:
            fields["assigned_to_id"] = self._assignee_id(data.get("assigned_to_id"))
        if "start_date" in data:
            fields["start_date"] = parse_optional_date(data.get("start_date"), "Start date")
        if "duration" in data:
            fields["duration"] = parse_optional_datetime(data.get("duration"), "Duration")

        if not fields:
            raise ValidationError("Nothing to update")
        self._tasks.update_checked(task_id, fields=fields)
        logger.info("Updated task %s: %s", task_id, ", ".join(sorted(fields)))

    def delete_task(self, *, current_role: Role, task_id: int) -> None:
        """Soft delete; payments stay but drop out of listings with their task."""
        self._require_admin(current_role)
        self._get(task_id)
        if not self._tasks.soft_delete(task_id):
            raise NotFoundError("Task not found")
        logger.info("Soft-deleted task %s", task_id)

    def update_delivery(self, *, current_role: Role, current_user_id: int, task_id: int, data: Mapping) -> None:
        """Assignee hands in work: note, link and a forward status move."""
        task = self._get(task_id)
        if current_role != Role.ADMIN and task.assigned_to_id != current_user_id:
            raise AuthorizationError("Access Denied")

        fields: dict = {}
        for key in ("note", "link"):
            if key in data:
                fields[key] = optional_text(data.get(key))

        if data.get("status"):
            status = parse_enum(TaskStatus, data["status"], "Status")
            if current_role != Role.ADMIN and status != task.status:
                if status not in ASSIGNEE_STATUSES:
                    raise ValidationError("Only an admin can set this status")
                if STATUS_ORDER.index(status) < STATUS_ORDER.index(task.status):
                    raise ValidationError("Task status can only move forward")
            fields["status"] = status

        if not fields:
            raise ValidationError("Nothing to update")
        self._tasks.update_task(task_id, fields=fields)
        logger.info("Delivery update on task %s by user %s", task_id, current_user_id)

    def list_tasks(
        self,
        query: ListQuery,
        filters: Optional[TaskFilter] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Page:
        rows, count = self._tasks.list_page(
            query=query,
            created_after=query.created_after(now=now),
            filters=filters or TaskFilter(),
        )
        return Page(data=[t.to_dict() for t in rows], count=count, page=query.page, limit=query.limit)

    def list_user_tasks(
        self,
        user_id: int,
        query: ListQuery,
        filters: Optional[TaskFilter] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Page:
        rows, count = self._tasks.list_page(
            query=query,
            created_after=query.created_after(now=now),
            filters=filters or TaskFilter(),
            assigned_to_id=user_id,
        )
        return Page(data=[t.to_dict() for t in rows], count=count, page=query.page, limit=query.limit)

    def calculation(self, *, assigned_to_id: Optional[int] = None) -> dict:
        return self._tasks.totals(assigned_to_id=assigned_to_id).to_dict()
