from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, UserStatus

PROFILE_FIELDS = (
    "phone",
    "whatsapp",
    "bkash_number",
    "nagad_number",
    "bank_account_number",
    "bank_name",
    "branch_name",
    "swift_code",
)


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no DB access. `password_hash` never leaves the service layer.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    bkash_number: Optional[str] = None
    nagad_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    swift_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def public_dict(self) -> dict:
        data = {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        for f in PROFILE_FIELDS:
            data[f] = getattr(self, f)
        return data
