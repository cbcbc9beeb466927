from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


@dataclass(frozen=True)
class Expense:
    expense_id: int
    title: str
    amount: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.expense_id,
            "title": self.title,
            "amount": self.amount,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class ExpenseTotals:
    total_expenses: int
    total_amount: Decimal

    @property
    def average_amount(self) -> Decimal:
        if not self.total_expenses:
            return Decimal("0.00")
        return (self.total_amount / self.total_expenses).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict:
        return {
            "totalExpenses": self.total_expenses,
            "totalAmount": self.total_amount,
            "averageAmount": self.average_amount,
        }
