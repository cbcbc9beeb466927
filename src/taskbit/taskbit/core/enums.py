from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role used for dashboard scoping."""

    ADMIN = "ADMIN"
    USER = "USER"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TaskStatus(str, Enum):
    """Task lifecycle: PENDING -> IN_PROGRESS -> SUBMITTED -> COMPLETED."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    COMPLETED = "COMPLETED"


class PaymentType(str, Enum):
    BKASH = "BKASH"
    NAGAD = "NAGAD"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaperType(str, Enum):
    CONFERENCE = "CONFERENCE"
    JOURNAL = "JOURNAL"
    THESIS = "THESIS"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SalaryType(str, Enum):
    MONTHLY = "MONTHLY"
    BONUS = "BONUS"
    OVERTIME = "OVERTIME"
    DEDUCTION = "DEDUCTION"


class SalaryStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class DateBucket(str, Enum):
    """Relative creation-date windows accepted by listings."""

    LAST_DAY = "last-day"
    LAST_WEEK = "last-week"
    LAST_MONTH = "last-month"
    LAST_6_MONTHS = "last-6months"
    LAST_YEAR = "last-year"
    ALL = "all"
