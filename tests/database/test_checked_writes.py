from __future__ import annotations

from decimal import Decimal

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from taskbit.core.enums import PaymentStatus, PaymentType, SalaryStatus, SalaryType
from taskbit.core.exceptions import (
    DuplicateSalaryError,
    NotFoundError,
    PaymentExceedsRemainingError,
    ValidationError,
)
from taskbit.payments.mysql_payment_repository import MySQLPaymentRepository
from taskbit.salaries.mysql_salary_repository import MySQLSalaryRepository
from taskbit.tasks.mysql_task_repository import MySQLTaskRepository


def _create_payment(db, amount: str) -> int:
    return MySQLPaymentRepository(db).create_checked(
        task_id=7,
        user_id=3,
        payment_type=PaymentType.BKASH,
        status=PaymentStatus.COMPLETED,
        amount=Decimal(amount),
        reference_number="TX-1",
    )


def _create_salary(db) -> int:
    return MySQLSalaryRepository(db).create_salary(
        user_id=3,
        amount=Decimal("500.00"),
        month=3,
        year=2026,
        salary_type=SalaryType.MONTHLY,
        status=SalaryStatus.PENDING,
        payment_type=None,
        reference_number=None,
        note=None,
    )


def test_payment_create_locks_sums_then_inserts_in_one_transaction(recording_db):
    recording_db.rows = {
        "FOR UPDATE": {"amount": Decimal("1000.00")},
        "SUM(amount)": {"paid": Decimal("800.00")},
    }

    assert _create_payment(recording_db, "200.00") == 42

    lock, total, insert = recording_db.sql()
    assert lock.startswith("SELECT amount FROM tasks") and lock.endswith("FOR UPDATE")
    assert "SUM(amount)" in total and "status='COMPLETED'" in total
    assert insert.startswith("INSERT INTO payments")
    assert len(recording_db.connections) == 1
    conn = recording_db.connections[0]
    assert conn.committed and conn.closed
    assert not conn.rolled_back


def test_payment_overpay_raises_before_insert_and_rolls_back(recording_db):
    recording_db.rows = {
        "FOR UPDATE": {"amount": Decimal("1000.00")},
        "SUM(amount)": {"paid": Decimal("800.00")},
    }

    with pytest.raises(PaymentExceedsRemainingError) as exc:
        _create_payment(recording_db, "300.00")

    assert exc.value.remaining == Decimal("200.00")
    assert not any(s.startswith("INSERT") for s in recording_db.sql())
    conn = recording_db.connections[0]
    assert conn.rolled_back and conn.closed
    assert not conn.committed


def test_payment_on_missing_task_rolls_back(recording_db):
    with pytest.raises(NotFoundError):
        _create_payment(recording_db, "10.00")

    assert len(recording_db.sql()) == 1
    assert recording_db.connections[0].rolled_back


def test_payment_edit_excludes_itself_from_the_paid_total(recording_db):
    recording_db.rows = {
        "FROM payments WHERE payment_id": {"task_id": 7, "amount": Decimal("100.00")},
        "FOR UPDATE": {"amount": Decimal("1000.00")},
        "SUM(amount)": {"paid": Decimal("600.00")},
    }

    MySQLPaymentRepository(recording_db).update_checked(5, fields={"amount": Decimal("400.00")})

    current, lock, (total, total_params), update = recording_db.statements
    assert lock[0].endswith("FOR UPDATE") and lock[1] == (7,)
    assert total.endswith("payment_id<>%s")
    assert total_params == (7, 5)
    assert update == ("UPDATE payments SET amount=%s WHERE payment_id=%s", (Decimal("400.00"), 5))
    assert recording_db.connections[0].committed


def test_task_amount_below_paid_is_rejected_under_the_row_lock(recording_db):
    recording_db.rows = {
        "FOR UPDATE": {"amount": Decimal("1000.00")},
        "SUM(amount)": {"paid": Decimal("1000.00")},
    }

    with pytest.raises(ValidationError):
        MySQLTaskRepository(recording_db).update_checked(7, fields={"amount": Decimal("900.00")})

    lock, total = recording_db.sql()
    assert lock.endswith("FOR UPDATE")
    assert "SUM(amount)" in total
    conn = recording_db.connections[0]
    assert conn.rolled_back
    assert not conn.committed


def test_task_update_runs_after_the_lock_on_one_connection(recording_db):
    recording_db.rows = {
        "FOR UPDATE": {"amount": Decimal("1000.00")},
        "SUM(amount)": {"paid": Decimal("400.00")},
    }

    MySQLTaskRepository(recording_db).update_checked(
        7, fields={"amount": Decimal("400.00"), "title": "Renamed"}
    )

    statements = recording_db.statements
    assert statements[0][0].endswith("FOR UPDATE")
    assert statements[-1] == (
        "UPDATE tasks SET amount=%s, title=%s WHERE task_id=%s AND is_deleted=0",
        (Decimal("400.00"), "Renamed", 7),
    )
    assert len(recording_db.connections) == 1
    assert recording_db.connections[0].committed


def test_task_update_without_amount_skips_the_paid_total(recording_db):
    recording_db.rows = {"FOR UPDATE": {"amount": Decimal("1000.00")}}

    MySQLTaskRepository(recording_db).update_checked(7, fields={"note": "checked"})

    assert not any("SUM(amount)" in s for s in recording_db.sql())
    assert recording_db.sql()[-1].startswith("UPDATE tasks SET note=%s")


def test_duplicate_monthly_insert_maps_to_domain_error(recording_db):
    recording_db.failures = {
        "INSERT INTO salaries": IntegrityError(
            msg="Duplicate entry '3-2026-3' for key 'uq_salaries_monthly'",
            errno=errorcode.ER_DUP_ENTRY,
        )
    }

    with pytest.raises(DuplicateSalaryError):
        _create_salary(recording_db)

    assert recording_db.connections[0].rolled_back


def test_duplicate_monthly_on_update_maps_to_domain_error(recording_db):
    recording_db.failures = {
        "UPDATE salaries": IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    }

    with pytest.raises(DuplicateSalaryError):
        MySQLSalaryRepository(recording_db).update_salary(9, fields={"salary_type": SalaryType.MONTHLY})


def test_other_integrity_errors_propagate(recording_db):
    recording_db.failures = {
        "INSERT INTO salaries": IntegrityError(msg="Cannot add a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    }

    with pytest.raises(IntegrityError):
        _create_salary(recording_db)
