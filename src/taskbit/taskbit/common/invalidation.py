"""Names of the client-side query groups that a mutation makes stale."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .datetime_utils import now_local

TASK_GROUPS = ("tasks", "tasks-calculation", "user-tasks")
TASK_DELIVERY_GROUPS = ("user-tasks", "tasks")
PAYMENT_GROUPS = ("payments", "payments-calculation", "tasks", "dashboard", "dashboard-calc")
EXPENSE_GROUPS = ("expenses", "expense-calculation", "dashboard")
USER_GROUPS = ("users",)
PROFILE_GROUPS = ("user-profile",)
_SALARY_GROUPS = (
    "salaries",
    "salaries-calculations",
    "user-salaries",
    "users",
    "dashboard",
)


def salary_groups(*, now: Optional[datetime] = None) -> list[str]:
    """Salary changes also stale the current-month dashboard view."""
    current = now or now_local()
    return list(_SALARY_GROUPS) + [f"dashboard?month={current.month}"]
