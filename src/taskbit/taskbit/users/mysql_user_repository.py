from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from ..common.listing import ListQuery, like_pattern
from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone
from .model import PROFILE_FIELDS, User
from .repository import UserRepository

_COLUMNS = (
    "user_id, name, email, password_hash, role, status, "
    + ", ".join(PROFILE_FIELDS)
    + ", created_at, updated_at"
)

_UPDATABLE = {"name", "email", "password_hash", "role", "status", *PROFILE_FIELDS}


def _row_to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        name=r["name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        status=UserStatus(r["status"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        **{f: r.get(f) for f in PROFILE_FIELDS},
    )


def _db_value(value):
    return value.value if isinstance(value, (Role, UserStatus)) else value


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

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
        columns = ["name", "email", "password_hash", "role", "status"]
        values: list[object] = [name, email, password_hash, role.value, status.value]
        for f in PROFILE_FIELDS:
            if f in profile:
                columns.append(f)
                values.append(profile[f])

        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO users({', '.join(columns)}) VALUES({placeholders})", tuple(values))
            return int(cur.lastrowid)

    def update_user(self, user_id: int, *, fields: dict) -> bool:
        items = [(k, _db_value(v)) for k, v in fields.items() if k in _UPDATABLE]
        if not items:
            return False
        assignments = ", ".join(f"{k}=%s" for k, _ in items)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {assignments} WHERE user_id=%s",
                tuple([v for _, v in items] + [int(user_id)]),
            )
            # rowcount is 0 when nothing changed; existence is checked by the service.
            return True

    def set_status(self, user_id: int, *, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE user_id=%s", (status.value, int(user_id)))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        query: ListQuery,
        created_after: Optional[datetime],
    ) -> Tuple[Sequence[User], int]:
        where = WhereBuilder()
        status = query.status or UserStatus.ACTIVE
        where.add("status=%s", status.value)
        where.add_search(("name", "email"), query.search_pattern)
        if created_after is not None:
            where.add("created_at >= %s", created_after)
        clause, params = where.build()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM users WHERE {clause}", tuple(params))
            count = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM users
                WHERE {clause}
                ORDER BY created_at DESC, user_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [query.limit, query.offset]),
            )
            return [_row_to_user(r) for r in fetchall(cur)], count

    def search_active(self, term: str, *, limit: int) -> Sequence[User]:
        where = WhereBuilder("status='ACTIVE'")
        where.add_search(("name", "email"), like_pattern(term))
        clause, params = where.build()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {clause} ORDER BY name LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_user(r) for r in fetchall(cur)]
