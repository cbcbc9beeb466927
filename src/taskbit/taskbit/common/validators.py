from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_title(value: str, field_name: str = "Title", min_len: int = 3) -> str:
    title = require_non_empty(value, field_name)
    return require_min_length(title, field_name, min_len)


def parse_amount(value, field_name: str = "Amount") -> Decimal:
    """Parse a money value into a 2-place Decimal that is strictly positive."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field_name} is too large")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"{field_name} is not valid")


def parse_optional_enum(enum_cls: Type[E], value, field_name: str) -> Optional[E]:
    if value is None or str(value).strip() == "":
        return None
    return parse_enum(enum_cls, value, field_name)


def parse_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not valid")
    if number <= 0:
        raise ValidationError(f"{field_name} is not valid")
    return number


def parse_month(value) -> int:
    month = parse_positive_int(value, "Month")
    if month > 12:
        raise ValidationError("Month is not valid")
    return month


def parse_optional_date(value, field_name: str) -> Optional[date]:
    if value is None or str(value).strip() == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date")


def parse_optional_datetime(value, field_name: str) -> Optional[datetime]:
    if value is None or str(value).strip() == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date")
    return parsed.replace(tzinfo=None)


def optional_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def optional_int_in_range(value, low: int, high: int) -> Optional[int]:
    """Lenient filter parsing: anything missing, non-numeric or out of range is None."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if low <= number <= high else None
