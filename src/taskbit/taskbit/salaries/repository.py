from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import PaymentType, SalaryStatus, SalaryType
from .model import Salary, SalaryFilter, SalaryTotals


class SalaryRepository(Protocol):
    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def find_monthly(self, *, user_id: int, month: int, year: int, exclude_id: Optional[int] = None) -> Optional[Salary]:
        raise NotImplementedError

    def create_salary(
        self,
        *,
        user_id: int,
        amount: Decimal,
        month: int,
        year: int,
        salary_type: SalaryType,
        status: SalaryStatus,
        payment_type: Optional[PaymentType],
        reference_number: Optional[str],
        note: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_salary(self, salary_id: int, *, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, salary_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        filters: SalaryFilter,
        user_id: Optional[int] = None,
    ) -> Tuple[Sequence[Salary], int]:
        raise NotImplementedError

    def totals(
        self,
        *,
        status: Optional[SalaryStatus],
        filters: SalaryFilter,
        user_id: Optional[int] = None,
    ) -> SalaryTotals:
        raise NotImplementedError
