from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus, PaymentType
from ..core.exceptions import PaymentExceedsRemainingError


@dataclass(frozen=True)
class Payment:
    """Domain entity: Payment against one task, paid out to one user."""

    payment_id: int
    task_id: int
    user_id: int
    payment_type: PaymentType
    status: PaymentStatus
    amount: Decimal
    reference_number: Optional[str] = None
    task_title: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.payment_id,
            "taskId": self.task_id,
            "userId": self.user_id,
            "paymentType": self.payment_type,
            "status": self.status,
            "amount": self.amount,
            "referenceNumber": self.reference_number,
            "task": {"id": self.task_id, "title": self.task_title},
            "user": {"id": self.user_id, "name": self.user_name, "email": self.user_email},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def check_remaining(task_amount: Decimal, completed: Decimal, amount: Decimal) -> Decimal:
    """Remaining task balance after `amount`; raises when `amount` overpays the task."""
    remaining = task_amount - completed
    if amount > remaining:
        raise PaymentExceedsRemainingError(remaining=max(remaining, Decimal("0.00")))
    return remaining - amount


@dataclass(frozen=True)
class PaymentTotals:
    by_status: dict  # status -> {"count": int, "amount": Decimal}

    def to_dict(self) -> dict:
        total_count = sum(v["count"] for v in self.by_status.values())
        total_amount = sum((v["amount"] for v in self.by_status.values()), Decimal("0.00"))
        return {
            "totalPayments": total_count,
            "totalAmount": total_amount,
            "completedAmount": self.by_status[PaymentStatus.COMPLETED.value]["amount"],
            "pendingAmount": self.by_status[PaymentStatus.PENDING.value]["amount"],
            "failedAmount": self.by_status[PaymentStatus.FAILED.value]["amount"],
            "byStatus": dict(self.by_status),
        }
