from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.enums import PaymentStatus, SalaryStatus

ZERO = Decimal("0.00")


def _percent(part: Decimal, whole: Decimal) -> int:
    if whole <= 0:
        return 0
    return int((part / whole * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class DashboardFigures:
    """Raw aggregates; `payments` / `salaries` map status -> {"count", "amount"}."""

    payments: dict
    salaries: dict
    expense_count: int
    expense_amount: Decimal
    month: Optional[int] = None
    year: Optional[int] = None

    def _amount(self, bucket: dict, status) -> Decimal:
        return bucket.get(status.value, {}).get("amount", ZERO)

    def _count(self, bucket: dict, status) -> int:
        return bucket.get(status.value, {}).get("count", 0)

    def to_summary(self) -> dict:
        completed = self._amount(self.payments, PaymentStatus.COMPLETED)
        pending_income = self._amount(self.payments, PaymentStatus.PENDING)
        failed = self._amount(self.payments, PaymentStatus.FAILED)
        paid_salaries = self._amount(self.salaries, SalaryStatus.PAID)
        pending_salaries = self._amount(self.salaries, SalaryStatus.PENDING)

        # Only completed payments count as income, only paid salaries as outgoing.
        incoming = completed
        outgoing = self.expense_amount + paid_salaries
        net = incoming - outgoing
        profit_margin = _percent(net, incoming)

        return {
            "period": {"month": self.month, "year": self.year},
            "financial": {
                "totalIncoming": incoming,
                "totalOutgoing": outgoing,
                "netProfit": net,
                "pendingIncome": pending_income,
                "pendingExpenses": pending_salaries,
                "profitMargin": profit_margin,
            },
            "payments": {
                "total": completed + pending_income + failed,
                "completed": completed,
                "pending": pending_income,
                "failed": failed,
            },
            "expenses": {"total": self.expense_amount},
            "salaries": {
                "total": sum((v.get("amount", ZERO) for v in self.salaries.values()), ZERO),
                "paid": paid_salaries,
                "pending": pending_salaries,
            },
            "counts": {
                "payments": {
                    "total": sum(v.get("count", 0) for v in self.payments.values()),
                    "completed": self._count(self.payments, PaymentStatus.COMPLETED),
                    "pending": self._count(self.payments, PaymentStatus.PENDING),
                    "failed": self._count(self.payments, PaymentStatus.FAILED),
                },
                "expenses": {"total": self.expense_count},
                "salaries": {
                    "total": sum(v.get("count", 0) for v in self.salaries.values()),
                    "paid": self._count(self.salaries, SalaryStatus.PAID),
                    "pending": self._count(self.salaries, SalaryStatus.PENDING),
                },
            },
            "insights": {
                "expensePercentage": _percent(self.expense_amount, incoming),
                "salaryPercentage": _percent(paid_salaries, incoming),
                "profitMargin": profit_margin,
            },
        }
