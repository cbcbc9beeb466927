from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Optional

from ..common.listing import ListQuery, Page
from ..common.validators import optional_text, parse_amount, parse_enum, parse_positive_int
from ..core.enums import PaymentStatus, PaymentType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, PaymentExceedsRemainingError, ValidationError
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


class PaymentService:
    """Use case: record payouts against tasks without ever overpaying a task."""

    def __init__(self, payments: PaymentRepository, tasks: TaskRepository, users: UserRepository):
        self._payments = payments
        self._tasks = tasks
        self._users = users

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

    def _payee_id(self, value) -> int:
        user_id = parse_positive_int(value, "User")
        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("User not found")
        return user_id

    def create_payment(self, *, current_role: Role, data: Mapping) -> int:
        self._require_admin(current_role)

        task_id = parse_positive_int(data.get("task_id"), "Task")
        task = self._tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")

        raw_user = data.get("user_id")
        if raw_user is None or str(raw_user).strip() == "":
            if task.assigned_to_id is None:
                raise ValidationError("Payment needs a user or an assigned task")
            user_id = task.assigned_to_id
        else:
            user_id = self._payee_id(raw_user)

        amount = parse_amount(data.get("amount"))
        try:
            payment_id = self._payments.create_checked(
                task_id=task_id,
                user_id=user_id,
                payment_type=parse_enum(PaymentType, data.get("payment_type"), "Payment type"),
                status=parse_enum(PaymentStatus, data.get("status") or PaymentStatus.PENDING.value, "Status"),
                amount=amount,
                reference_number=optional_text(data.get("reference_number")),
            )
        except PaymentExceedsRemainingError as e:
            logger.warning("Payment of %s on task %s rejected, remaining %s", amount, task_id, e.remaining)
            raise

        logger.info("Created payment %s on task %s (%s)", payment_id, task_id, amount)
        return payment_id

    def update_payment(self, *, current_role: Role, payment_id: int, data: Mapping) -> None:
        self._require_admin(current_role)
        if not self._payments.get_by_id(payment_id):
            raise NotFoundError("Payment not found")

        fields: dict = {}
        if "amount" in data:
            fields["amount"] = parse_amount(data.get("amount"))
        if data.get("status"):
            fields["status"] = parse_enum(PaymentStatus, data["status"], "Status")
        if data.get("payment_type"):
            fields["payment_type"] = parse_enum(PaymentType, data["payment_type"], "Payment type")
        if "reference_number" in data:
            fields["reference_number"] = optional_text(data.get("reference_number"))
        if data.get("user_id"):
            fields["user_id"] = self._payee_id(data["user_id"])

        if not fields:
            raise ValidationError("Nothing to update")
        self._payments.update_checked(payment_id, fields=fields)
        logger.info("Updated payment %s: %s", payment_id, ", ".join(sorted(fields)))

    def delete_payment(self, *, current_role: Role, payment_id: int) -> None:
        self._require_admin(current_role)
        if not self._payments.delete(payment_id):
            raise NotFoundError("Payment not found")
        logger.info("Deleted payment %s", payment_id)

    def list_payments(self, query: ListQuery, *, now: Optional[datetime] = None) -> Page:
        rows, count = self._payments.list_page(query=query, created_after=query.created_after(now=now))
        return Page(data=[p.to_dict() for p in rows], count=count, page=query.page, limit=query.limit)

    def list_user_payments(self, user_id: int, query: ListQuery, *, now: Optional[datetime] = None) -> Page:
        rows, count = self._payments.list_page(
            query=query, created_after=query.created_after(now=now), user_id=user_id
        )
        return Page(data=[p.to_dict() for p in rows], count=count, page=query.page, limit=query.limit)

    def calculation(self, *, user_id: Optional[int] = None) -> dict:
        return self._payments.totals(user_id=user_id).to_dict()
