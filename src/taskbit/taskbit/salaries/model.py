from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.listing import parse_filter_enum
from ..common.validators import optional_int_in_range
from ..core.constants import MAX_FILTER_YEAR
from ..core.enums import PaymentType, SalaryStatus, SalaryType


@dataclass(frozen=True)
class Salary:
    """Domain entity: one salary line (monthly pay, bonus, overtime or deduction)."""

    salary_id: int
    user_id: int
    amount: Decimal
    month: int
    year: int
    salary_type: SalaryType
    status: SalaryStatus
    payment_type: Optional[PaymentType] = None
    reference_number: Optional[str] = None
    note: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.salary_id,
            "userId": self.user_id,
            "amount": self.amount,
            "month": self.month,
            "year": self.year,
            "salaryType": self.salary_type,
            "status": self.status,
            "paymentType": self.payment_type,
            "referenceNumber": self.reference_number,
            "note": self.note,
            "user": {"id": self.user_id, "name": self.user_name, "email": self.user_email},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class SalaryFilter:
    """Salary-only listing filters; unknown values are ignored."""

    salary_type: Optional[SalaryType] = None
    payment_type: Optional[PaymentType] = None
    month: Optional[int] = None
    year: Optional[int] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "SalaryFilter":
        return cls(
            salary_type=parse_filter_enum(args.get("salary_type"), SalaryType),
            payment_type=parse_filter_enum(args.get("payment_type"), PaymentType),
            month=optional_int_in_range(args.get("month"), 1, 12),
            year=optional_int_in_range(args.get("year"), 1, MAX_FILTER_YEAR),
        )


@dataclass(frozen=True)
class SalaryTotals:
    by_status: dict  # status -> {"count": int, "amount": Decimal}
    status: Optional[SalaryStatus] = None

    @property
    def total_amount(self) -> Decimal:
        # Unfiltered totals report what was actually paid out.
        key = (self.status or SalaryStatus.PAID).value
        return self.by_status[key]["amount"]

    def to_dict(self) -> dict:
        return {
            "totalSalaries": sum(v["count"] for v in self.by_status.values()),
            "totalAmount": self.total_amount,
            "paidCount": self.by_status[SalaryStatus.PAID.value]["count"],
            "pendingCount": self.by_status[SalaryStatus.PENDING.value]["count"],
            "cancelledCount": self.by_status[SalaryStatus.CANCELLED.value]["count"],
            "byStatus": dict(self.by_status),
        }
