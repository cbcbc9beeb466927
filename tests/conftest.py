from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from taskbit.container import assemble
from taskbit.core.enums import (
    PaperType,
    PaymentStatus,
    PaymentType,
    Role,
    SalaryStatus,
    SalaryType,
    TaskStatus,
    UserStatus,
)
from taskbit.core.exceptions import DuplicateSalaryError, NotFoundError
from taskbit.dashboard.model import DashboardFigures
from taskbit.expenses.model import Expense, ExpenseTotals
from taskbit.main import create_app
from taskbit.payments.model import Payment, PaymentTotals, check_remaining
from taskbit.salaries.model import Salary, SalaryTotals
from taskbit.tasks.model import Task, TaskTotals, check_amount_covers_paid
from taskbit.users.model import User

FIXED_NOW = datetime(2026, 3, 15, 12, 0, 0)
ZERO = Decimal("0.00")


def _contains(term: str, *values) -> bool:
    term = (term or "").strip().lower()
    if not term:
        return True
    return any(term in (v or "").lower() for v in values)


def _page(rows, query):
    rows = sorted(rows, key=lambda r: (r.created_at, _id_of(r)), reverse=True)
    return rows[query.offset : query.offset + query.limit], len(rows)


def _id_of(row) -> int:
    for attr in ("task_id", "payment_id", "salary_id", "expense_id", "user_id"):
        if hasattr(row, attr):
            return getattr(row, attr)
    return 0


def _by_status(rows, statuses) -> dict:
    out = {s.value: {"count": 0, "amount": ZERO} for s in statuses}
    for r in rows:
        bucket = out[r.status.value]
        bucket["count"] += 1
        bucket["amount"] += r.amount
    return out


class Store:
    """Shared in-memory tables behind the fake repositories."""

    def __init__(self, now: datetime):
        self.now = now
        self.users: dict[int, User] = {}
        self.tasks: dict[int, Task] = {}
        self.payments: dict[int, Payment] = {}
        self.salaries: dict[int, Salary] = {}
        self.expenses: dict[int, Expense] = {}
        self._ids: dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self._ids[table] = self._ids.get(table, 0) + 1
        return self._ids[table]

    def completed_paid(self, task_id: int, *, exclude_payment_id: Optional[int] = None) -> Decimal:
        return sum(
            (
                p.amount
                for p in self.payments.values()
                if p.task_id == task_id and p.status == PaymentStatus.COMPLETED and p.payment_id != exclude_payment_id
            ),
            ZERO,
        )

    def live_task(self, task_id: int) -> Optional[Task]:
        task = self.tasks.get(int(task_id))
        if not task or task.is_deleted:
            return None
        return replace(task, paid=self.completed_paid(task.task_id))


class InMemoryUsers:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, user_id):
        return self._s.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self._s.users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, status, profile):
        uid = self._s.next_id("users")
        self._s.users[uid] = User(
            user_id=uid,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            created_at=self._s.now,
            updated_at=self._s.now,
            **profile,
        )
        return uid

    def update_user(self, user_id, *, fields):
        self._s.users[int(user_id)] = replace(self._s.users[int(user_id)], **fields)
        return True

    def set_status(self, user_id, *, status):
        if int(user_id) not in self._s.users:
            return False
        return self.update_user(user_id, fields={"status": status})

    def list_page(self, *, query, created_after):
        status = query.status or UserStatus.ACTIVE
        rows = [
            u
            for u in self._s.users.values()
            if u.status == status
            and _contains(query.search, u.name, u.email)
            and (created_after is None or u.created_at >= created_after)
        ]
        return _page(rows, query)

    def search_active(self, term, *, limit):
        rows = [u for u in self._s.users.values() if u.is_active and _contains(term, u.name, u.email)]
        return sorted(rows, key=lambda u: u.name)[:limit]


class InMemoryTasks:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, task_id):
        return self._s.live_task(task_id)

    def create_task(
        self, *, title, description, link, amount, status, paper_type, assigned_to_id, created_by_id, start_date, duration
    ):
        tid = self._s.next_id("tasks")
        self._s.tasks[tid] = Task(
            task_id=tid,
            title=title,
            description=description,
            link=link,
            amount=amount,
            status=status,
            paper_type=paper_type,
            assigned_to_id=assigned_to_id,
            created_by_id=created_by_id,
            start_date=start_date,
            duration=duration,
            created_at=self._s.now,
            updated_at=self._s.now,
        )
        return tid

    def update_task(self, task_id, *, fields):
        self._s.tasks[int(task_id)] = replace(self._s.tasks[int(task_id)], **fields)
        return True

    def update_checked(self, task_id, *, fields):
        task = self._s.live_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if "amount" in fields:
            check_amount_covers_paid(fields["amount"], task.paid)
        self.update_task(task_id, fields=fields)

    def soft_delete(self, task_id):
        task = self._s.tasks.get(int(task_id))
        if not task or task.is_deleted:
            return False
        self._s.tasks[int(task_id)] = replace(task, is_deleted=True)
        return True

    def list_page(self, *, query, created_after, filters, assigned_to_id=None):
        rows = []
        for tid in self._s.tasks:
            task = self._s.live_task(tid)
            if task is None:
                continue
            if query.status is not None and task.status != query.status:
                continue
            if assigned_to_id is not None and task.assigned_to_id != assigned_to_id:
                continue
            if not filters.matches(task):
                continue
            if not _contains(query.search, task.title, task.description):
                continue
            if created_after is not None and task.created_at < created_after:
                continue
            rows.append(task)
        return _page(rows, query)

    def totals(self, *, assigned_to_id=None):
        tasks = [self._s.live_task(tid) for tid in self._s.tasks]
        tasks = [t for t in tasks if t and (assigned_to_id is None or t.assigned_to_id == assigned_to_id)]
        by_status = {s.value: 0 for s in TaskStatus}
        for t in tasks:
            by_status[t.status.value] += 1
        return TaskTotals(
            total_tasks=len(tasks),
            total_amount=sum((t.amount for t in tasks), ZERO),
            total_paid=sum((t.paid for t in tasks), ZERO),
            by_status=by_status,
        )


class InMemoryPayments:
    def __init__(self, store: Store):
        self._s = store

    def _visible(self, payment):
        return self._s.live_task(payment.task_id) is not None

    def get_by_id(self, payment_id):
        payment = self._s.payments.get(int(payment_id))
        return payment if payment and self._visible(payment) else None

    def create_checked(self, *, task_id, user_id, payment_type, status, amount, reference_number):
        task = self._s.live_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        check_remaining(task.amount, self._s.completed_paid(task.task_id), amount)
        pid = self._s.next_id("payments")
        self._s.payments[pid] = Payment(
            payment_id=pid,
            task_id=int(task_id),
            user_id=int(user_id),
            payment_type=payment_type,
            status=status,
            amount=amount,
            reference_number=reference_number,
            task_title=task.title,
            created_at=self._s.now,
            updated_at=self._s.now,
        )
        return pid

    def update_checked(self, payment_id, *, fields):
        current = self._s.payments.get(int(payment_id))
        if current is None:
            raise NotFoundError("Payment not found")
        task = self._s.live_task(current.task_id)
        if task is None:
            raise NotFoundError("Task not found")
        amount = fields.get("amount", current.amount)
        check_remaining(task.amount, self._s.completed_paid(task.task_id, exclude_payment_id=current.payment_id), amount)
        self._s.payments[int(payment_id)] = replace(current, **fields)

    def delete(self, payment_id):
        return self._s.payments.pop(int(payment_id), None) is not None

    def list_page(self, *, query, created_after, user_id=None):
        rows = [
            p
            for p in self._s.payments.values()
            if self._visible(p)
            and (query.status is None or p.status == query.status)
            and (user_id is None or p.user_id == user_id)
            and _contains(query.search, p.reference_number, p.task_title)
            and (created_after is None or p.created_at >= created_after)
        ]
        return _page(rows, query)

    def totals(self, *, user_id=None):
        rows = [p for p in self._s.payments.values() if self._visible(p) and (user_id is None or p.user_id == user_id)]
        return PaymentTotals(by_status=_by_status(rows, PaymentStatus))


def _salary_matches(s, filters, user_id) -> bool:
    return (
        (filters.salary_type is None or s.salary_type == filters.salary_type)
        and (filters.payment_type is None or s.payment_type == filters.payment_type)
        and (filters.month is None or s.month == filters.month)
        and (filters.year is None or s.year == filters.year)
        and (user_id is None or s.user_id == user_id)
    )


class InMemorySalaries:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, salary_id):
        return self._s.salaries.get(int(salary_id))

    def find_monthly(self, *, user_id, month, year, exclude_id=None):
        return self._monthly(user_id, month, year, exclude_id)

    def _monthly(self, user_id, month, year, exclude_id=None):
        return next(
            (
                s
                for s in self._s.salaries.values()
                if s.user_id == user_id
                and s.month == month
                and s.year == year
                and s.salary_type == SalaryType.MONTHLY
                and s.salary_id != exclude_id
            ),
            None,
        )

    def create_salary(self, *, user_id, amount, month, year, salary_type, status, payment_type, reference_number, note):
        self._unique_monthly(int(user_id), month, year, salary_type)
        sid = self._s.next_id("salaries")
        user = self._s.users.get(int(user_id))
        self._s.salaries[sid] = Salary(
            salary_id=sid,
            user_id=int(user_id),
            amount=amount,
            month=month,
            year=year,
            salary_type=salary_type,
            status=status,
            payment_type=payment_type,
            reference_number=reference_number,
            note=note,
            user_name=user.name if user else None,
            created_at=self._s.now,
            updated_at=self._s.now,
        )
        return sid

    def update_salary(self, salary_id, *, fields):
        current = self._s.salaries[int(salary_id)]
        self._unique_monthly(
            current.user_id, current.month, current.year, fields.get("salary_type", current.salary_type), current.salary_id
        )
        self._s.salaries[int(salary_id)] = replace(current, **fields)
        return True

    def _unique_monthly(self, user_id, month, year, salary_type, exclude_id=None):
        # Mirrors the uq_salaries_monthly key.
        if salary_type == SalaryType.MONTHLY and self._monthly(user_id, month, year, exclude_id):
            raise DuplicateSalaryError("Monthly salary for this month already exists for this user")

    def delete(self, salary_id):
        return self._s.salaries.pop(int(salary_id), None) is not None

    def list_page(self, *, query, created_after, filters, user_id=None):
        rows = [
            s
            for s in self._s.salaries.values()
            if _salary_matches(s, filters, user_id)
            and (query.status is None or s.status == query.status)
            and _contains(query.search, s.user_name, s.reference_number)
            and (created_after is None or s.created_at >= created_after)
        ]
        return _page(rows, query)

    def totals(self, *, status, filters, user_id=None):
        rows = [s for s in self._s.salaries.values() if _salary_matches(s, filters, user_id)]
        return SalaryTotals(by_status=_by_status(rows, SalaryStatus), status=status)


class InMemoryExpenses:
    def __init__(self, store: Store):
        self._s = store

    def get_by_id(self, expense_id):
        return self._s.expenses.get(int(expense_id))

    def create_expense(self, *, title, amount):
        eid = self._s.next_id("expenses")
        self._s.expenses[eid] = Expense(
            expense_id=eid, title=title, amount=amount, created_at=self._s.now, updated_at=self._s.now
        )
        return eid

    def update_expense(self, expense_id, *, fields):
        self._s.expenses[int(expense_id)] = replace(self._s.expenses[int(expense_id)], **fields)
        return True

    def delete(self, expense_id):
        return self._s.expenses.pop(int(expense_id), None) is not None

    def _filtered(self, search, created_after, period):
        return [
            e
            for e in self._s.expenses.values()
            if _contains(search, e.title)
            and (created_after is None or e.created_at >= created_after)
            and period.matches(e.created_at)
        ]

    def list_page(self, *, query, created_after, period):
        return _page(self._filtered(query.search, created_after, period), query)

    def totals(self, *, search_pattern, created_after, period):
        # The pattern is "%term%"; the fake matches on the bare term.
        term = (search_pattern or "").strip("%")
        rows = self._filtered(term, created_after, period)
        return ExpenseTotals(total_expenses=len(rows), total_amount=sum((e.amount for e in rows), ZERO))


class InMemoryDashboard:
    def __init__(self, store: Store):
        self._s = store

    def figures(self, *, start, end, month, year):
        def in_range(ts):
            return (start is None or ts >= start) and (end is None or ts < end)

        payments = [
            p for p in self._s.payments.values() if self._s.live_task(p.task_id) is not None and in_range(p.created_at)
        ]
        salaries = [
            s
            for s in self._s.salaries.values()
            if (month is None or s.month == month) and (year is None or s.year == year)
        ]
        expenses = [e for e in self._s.expenses.values() if in_range(e.created_at)]
        return DashboardFigures(
            payments=_by_status(payments, PaymentStatus),
            salaries=_by_status(salaries, SalaryStatus),
            expense_count=len(expenses),
            expense_amount=sum((e.amount for e in expenses), ZERO),
            month=month,
            year=year,
        )


class RecordingCursor:
    """Logs each statement and answers from rows keyed by an SQL fragment."""

    def __init__(self, db: "RecordingDatabase"):
        self._db = db
        self._row = None
        self.lastrowid = None
        self.rowcount = 0
        self.closed = False

    def execute(self, sql, params=()):
        statement = " ".join(sql.split())
        self._db.statements.append((statement, tuple(params)))
        for fragment, error in self._db.failures.items():
            if fragment in statement:
                raise error
        self._row = next((row for fragment, row in self._db.rows.items() if fragment in statement), None)
        if statement.startswith("INSERT"):
            self.lastrowid = self._db.next_id
        self.rowcount = 1

    def fetchone(self):
        return self._row

    def fetchall(self):
        return [self._row] if self._row else []

    def close(self):
        self.closed = True


class RecordingConnection:
    def __init__(self, db: "RecordingDatabase"):
        self._db = db
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return RecordingCursor(self._db)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class RecordingDatabase:
    """Stands in for `DatabaseConnection`; keeps every connection it hands out."""

    def __init__(self):
        self.rows: dict = {}
        self.failures: dict = {}
        self.statements: list = []
        self.connections: list = []
        self.next_id = 42

    def connect(self) -> RecordingConnection:
        conn = RecordingConnection(self)
        self.connections.append(conn)
        return conn

    def sql(self) -> list:
        return [statement for statement, _ in self.statements]


@pytest.fixture
def recording_db() -> RecordingDatabase:
    return RecordingDatabase()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def store(fixed_now) -> Store:
    return Store(fixed_now)


@pytest.fixture
def repos(store) -> SimpleNamespace:
    return SimpleNamespace(
        users=InMemoryUsers(store),
        tasks=InMemoryTasks(store),
        payments=InMemoryPayments(store),
        salaries=InMemorySalaries(store),
        expenses=InMemoryExpenses(store),
        dashboard=InMemoryDashboard(store),
    )


@pytest.fixture
def container(repos):
    return assemble(
        users_repo=repos.users,
        tasks_repo=repos.tasks,
        payments_repo=repos.payments,
        salaries_repo=repos.salaries,
        expenses_repo=repos.expenses,
        dashboard_repo=repos.dashboard,
    )


@pytest.fixture
def make_user(repos):
    def _make(
        name: str = "Writer",
        email: str = "writer@example.com",
        password: str = "secret123",
        role: Role = Role.USER,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        uid = repos.users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            status=status,
            profile={},
        )
        return repos.users.get_by_id(uid)

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Admin", email="admin@example.com", password="admin123", role=Role.ADMIN)


@pytest.fixture
def writer(make_user) -> User:
    return make_user()


@pytest.fixture
def make_task(store, repos):
    def _make(
        title: str = "Article",
        amount: str = "1000.00",
        assigned_to_id: Optional[int] = None,
        status: TaskStatus = TaskStatus.PENDING,
        created_at: Optional[datetime] = None,
        description: Optional[str] = None,
        paper_type: Optional[PaperType] = None,
        duration: Optional[datetime] = None,
    ) -> Task:
        tid = repos.tasks.create_task(
            title=title,
            description=description,
            link=None,
            amount=Decimal(amount),
            status=status,
            paper_type=paper_type,
            assigned_to_id=assigned_to_id,
            created_by_id=None,
            start_date=None,
            duration=duration,
        )
        if created_at is not None:
            store.tasks[tid] = replace(store.tasks[tid], created_at=created_at)
        return repos.tasks.get_by_id(tid)

    return _make


@pytest.fixture
def pay(repos):
    def _pay(task_id: int, user_id: int, amount: str, status: PaymentStatus = PaymentStatus.COMPLETED) -> int:
        return repos.payments.create_checked(
            task_id=task_id,
            user_id=user_id,
            payment_type=PaymentType.BKASH,
            status=status,
            amount=Decimal(amount),
            reference_number=None,
        )

    return _pay


@pytest.fixture
def days_ago(fixed_now):
    def _ago(days: int) -> datetime:
        return fixed_now - timedelta(days=days)

    return _ago


@pytest.fixture
def app(container):
    app = create_app(container=container, settings_module="config.testing")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post("/signin", json={"email": email, "password": password})

    return _login
