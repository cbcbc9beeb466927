from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping, Optional

from ..common.listing import ListQuery, Page
from ..common.validators import (
    optional_text,
    parse_amount,
    parse_enum,
    parse_month,
    parse_optional_enum,
    parse_positive_int,
)
from ..core.enums import PaymentType, Role, SalaryStatus, SalaryType
from ..core.exceptions import AuthorizationError, DuplicateSalaryError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import SalaryFilter
from .repository import SalaryRepository

logger = logging.getLogger(__name__)


class SalaryService:
    """Use case: salaries per user and month; one MONTHLY line per user/month/year."""

    def __init__(self, salaries: SalaryRepository, users: UserRepository):
        self._salaries = salaries
        self._users = users

    def _require_admin(self, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

    def _ensure_unique_monthly(self, *, user_id: int, month: int, year: int, exclude_id: Optional[int] = None) -> None:
        if self._salaries.find_monthly(user_id=user_id, month=month, year=year, exclude_id=exclude_id):
            logger.warning("Duplicate monthly salary for user %s on %s/%s", user_id, month, year)
            raise DuplicateSalaryError(f"Monthly salary for {month}/{year} already exists for this user")

    def create_salary(self, *, current_role: Role, data: Mapping) -> int:
        self._require_admin(current_role)

        user_id = parse_positive_int(data.get("user_id"), "User")
        if not self._users.get_by_id(user_id):
            raise ValidationError("User not found")
        amount = parse_amount(data.get("amount"))
        month = parse_month(data.get("month"))
        year = parse_positive_int(data.get("year"), "Year")
        salary_type = parse_enum(SalaryType, data.get("salary_type") or SalaryType.MONTHLY.value, "Salary type")
        status = parse_enum(SalaryStatus, data.get("status") or SalaryStatus.PENDING.value, "Status")

        if salary_type == SalaryType.MONTHLY:
            self._ensure_unique_monthly(user_id=user_id, month=month, year=year)

        salary_id = self._salaries.create_salary(
            user_id=user_id,
            amount=amount,
            month=month,
            year=year,
            salary_type=salary_type,
            status=status,
            payment_type=parse_optional_enum(PaymentType, data.get("payment_type"), "Payment type"),
            reference_number=optional_text(data.get("reference_number")),
            note=optional_text(data.get("note")),
        )
        logger.info("Created %s salary %s for user %s (%s/%s)", salary_type.value, salary_id, user_id, month, year)
        return salary_id

    def update_salary(self, *, current_role: Role, salary_id: int, data: Mapping) -> None:
        self._require_admin(current_role)
        salary = self._salaries.get_by_id(salary_id)
        if not salary:
            raise NotFoundError("Salary not found")

        fields: dict = {}
        if "amount" in data:
            fields["amount"] = parse_amount(data.get("amount"))
        if data.get("salary_type"):
            fields["salary_type"] = parse_enum(SalaryType, data["salary_type"], "Salary type")
        if data.get("status"):
            fields["status"] = parse_enum(SalaryStatus, data["status"], "Status")
        if "payment_type" in data:
            fields["payment_type"] = parse_optional_enum(PaymentType, data.get("payment_type"), "Payment type")
        for key in ("reference_number", "note"):
            if key in data:
                fields[key] = optional_text(data.get(key))

        if not fields:
            raise ValidationError("Nothing to update")
        if fields.get("salary_type", salary.salary_type) == SalaryType.MONTHLY:
            self._ensure_unique_monthly(
                user_id=salary.user_id, month=salary.month, year=salary.year, exclude_id=salary.salary_id
            )

        self._salaries.update_salary(salary_id, fields=fields)
        logger.info("Updated salary %s: %s", salary_id, ", ".join(sorted(fields)))

    def delete_salary(self, *, current_role: Role, salary_id: int) -> None:
        self._require_admin(current_role)
        if not self._salaries.delete(salary_id):
            raise NotFoundError("Salary not found")
        logger.info("Deleted salary %s", salary_id)

    def list_salaries(
        self,
        query: ListQuery,
        filters: SalaryFilter,
        *,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        rows, count = self._salaries.list_page(
            query=query,
            created_after=query.created_after(now=now),
            filters=filters,
            user_id=user_id,
        )
        return Page(data=[s.to_dict() for s in rows], count=count, page=query.page, limit=query.limit)

    def calculation(
        self,
        filters: SalaryFilter,
        *,
        status: Optional[SalaryStatus] = None,
        user_id: Optional[int] = None,
    ) -> dict:
        return self._salaries.totals(status=status, filters=filters, user_id=user_id).to_dict()
