from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..common.listing import ListQuery
from ..core.enums import Role, UserStatus
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        status: UserStatus,
        profile: dict,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, *, fields: dict) -> bool:
        """Admin update: any column in `fields` (name, email, role, status, password_hash, profile fields)."""

        raise NotImplementedError

    def set_status(self, user_id: int, *, status: UserStatus) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
    ) -> Tuple[Sequence[User], int]:
        raise NotImplementedError

    def search_active(self, term: str, *, limit: int) -> Sequence[User]:
        raise NotImplementedError
