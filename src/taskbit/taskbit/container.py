from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .dashboard.mysql_dashboard_repository import MySQLDashboardRepository
from .dashboard.repository import DashboardRepository
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.repository import ExpenseRepository
from .expenses.service import ExpenseService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .salaries.mysql_salary_repository import MySQLSalaryRepository
from .salaries.repository import SalaryRepository
from .salaries.service import SalaryService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    tasks_repo: TaskRepository
    payments_repo: PaymentRepository
    salaries_repo: SalaryRepository
    expenses_repo: ExpenseRepository
    dashboard_repo: DashboardRepository

    auth_service: AuthService
    user_service: UserService
    task_service: TaskService
    payment_service: PaymentService
    salary_service: SalaryService
    expense_service: ExpenseService
    dashboard_service: DashboardService


def assemble(
    *,
    users_repo: UserRepository,
    tasks_repo: TaskRepository,
    payments_repo: PaymentRepository,
    salaries_repo: SalaryRepository,
    expenses_repo: ExpenseRepository,
    dashboard_repo: DashboardRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any set of repositories (MySQL or in-memory)."""
    return Container(
        conn=conn,
        users_repo=users_repo,
        tasks_repo=tasks_repo,
        payments_repo=payments_repo,
        salaries_repo=salaries_repo,
        expenses_repo=expenses_repo,
        dashboard_repo=dashboard_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        task_service=TaskService(tasks_repo, users_repo),
        payment_service=PaymentService(payments_repo, tasks_repo, users_repo),
        salary_service=SalaryService(salaries_repo, users_repo),
        expense_service=ExpenseService(expenses_repo),
        dashboard_service=DashboardService(dashboard_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        salaries_repo=MySQLSalaryRepository(conn),
        expenses_repo=MySQLExpenseRepository(conn),
        dashboard_repo=MySQLDashboardRepository(conn),
    )
