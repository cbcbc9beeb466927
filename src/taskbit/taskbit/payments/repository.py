from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import PaymentStatus, PaymentType
from .model import Payment, PaymentTotals


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def create_checked(
        self,
        *,
        task_id: int,
        user_id: int,
        payment_type: PaymentType,
        status: PaymentStatus,
        amount: Decimal,
        reference_number: Optional[str],
    ) -> int:
        """Insert a payment unless it overpays its task.

        The task row is locked while the completed total is summed and the row
        inserted, so concurrent payments cannot both pass the check.
        Raises NotFoundError / PaymentExceedsRemainingError.
        """

        raise NotImplementedError

    def update_checked(self, payment_id: int, *, fields: dict) -> None:
        """Same guarantee as `create_checked`; the payment itself is left out of the sum."""

        raise NotImplementedError

    def delete(self, payment_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
        user_id: Optional[int] = None,
    ) -> Tuple[Sequence[Payment], int]:
        raise NotImplementedError

    def totals(self, *, user_id: Optional[int] = None) -> PaymentTotals:
        raise NotImplementedError
