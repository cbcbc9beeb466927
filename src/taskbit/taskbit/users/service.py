from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.listing import ListQuery, Page
from ..common.validators import parse_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, USER_SEARCH_LIMIT
from ..core.enums import Role, UserStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import PROFILE_FIELDS, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the signed session after sign-in."""

    user_id: int
    name: str
    email: str
    role: Role
    status: UserStatus
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    bkash_number: Optional[str] = None
    nagad_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    swift_code: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            **{f: getattr(user, f) for f in PROFILE_FIELDS},
        )

    def to_session(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        data["status"] = self.status.value
        return data

    @classmethod
    def from_session(cls, data: Mapping) -> Optional["SessionUser"]:
        try:
            return cls(
                user_id=int(data["user_id"]),
                name=data.get("name") or "",
                email=data.get("email") or "",
                role=Role(data["role"]),
                status=UserStatus(data.get("status") or UserStatus.ACTIVE.value),
                **{f: data.get(f) for f in PROFILE_FIELDS},
            )
        except (KeyError, TypeError, ValueError):
            return None


def _clean_profile(data: Mapping) -> dict:
    out = {}
    for f in PROFILE_FIELDS:
        if f in data:
            value = data.get(f)
            if value is not None:
                value = str(value).strip() or None
            out[f] = value
    return out


def _require_email(value: str) -> str:
    email = require_non_empty(value, "Email").lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Email is not valid")
    return email


class AuthService:
    """Use case: sign in with email + password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except Exception:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser.from_user(user)


class UserService:
    """Use case: manage users (admin) and the signed-in user's own profile."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_user(self, *, current_role: Role, data: Mapping) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

        name = require_non_empty(data.get("name"), "Name")
        email = _require_email(data.get("email"))
        password = data.get("password") or ""
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = parse_enum(Role, data.get("role") or Role.USER.value, "Role")
        status = parse_enum(UserStatus, data.get("status") or UserStatus.ACTIVE.value, "Status")

        if self._users.get_by_email(email):
            raise ValidationError("User with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            status=status,
            profile=_clean_profile(data),
        )
        logger.info("Created user %s (%s)", user_id, role.value)
        return user_id

    def update_user(self, *, current_role: Role, user_id: int, data: Mapping) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        fields: dict = _clean_profile(data)
        if "name" in data:
            fields["name"] = require_non_empty(data.get("name"), "Name")
        if "email" in data:
            email = _require_email(data.get("email"))
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ValidationError("User with this email already exists")
            fields["email"] = email
        if data.get("password"):
            require_min_length(data["password"], "Password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(data["password"])
        if data.get("role"):
            fields["role"] = parse_enum(Role, data["role"], "Role")
        if data.get("status"):
            fields["status"] = parse_enum(UserStatus, data["status"], "Status")

        if not fields:
            raise ValidationError("Nothing to update")
        self._users.update_user(user_id, fields=fields)

    def delete_user(self, *, current_role: Role, current_user_id: int, user_id: int) -> None:
        """Soft delete: flip status to INACTIVE."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Access Denied")
        if int(user_id) == int(current_user_id):
            raise ValidationError("You cannot delete your own account")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        if not self._users.set_status(user_id, status=UserStatus.INACTIVE):
            raise ValidationError("Failed to delete user")
        logger.info("Deactivated user %s", user_id)

    def update_profile(self, *, user_id: int, data: Mapping) -> SessionUser:
        """Self-service edit: contact and payout fields only; role/status are ignored."""
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found")

        fields: dict = _clean_profile(data)
        if "name" in data:
            fields["name"] = require_non_empty(data.get("name"), "Name")
        if not fields:
            raise ValidationError("Nothing to update")

        self._users.update_user(user_id, fields=fields)
        refreshed = self._users.get_by_id(user_id)
        return SessionUser.from_user(refreshed or user)

    def get_profile(self, user_id: int) -> dict:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user.public_dict()

    def list_users(self, query: ListQuery, *, now: Optional[datetime] = None) -> Page:
        rows, count = self._users.list_page(query=query, created_after=query.created_after(now=now))
        return Page(data=[u.public_dict() for u in rows], count=count, page=query.page, limit=query.limit)

    def search_users(self, term: str) -> list[dict]:
        term = (term or "").strip()
        if not term:
            return []
        users = self._users.search_active(term, limit=USER_SEARCH_LIMIT)
        return [{"id": u.user_id, "name": u.name, "email": u.email, "role": u.role.value} for u in users]
