from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_ADMIN = ("Admin Demo", "admin@taskbit.local", "admin123", "ADMIN")
DEMO_USER = ("Writer Demo", "user@taskbit.local", "user1234", "USER")


def _strip_create_db_and_use(sql: str) -> str:
    # The configured DB_NAME wins over whatever schema.sql names.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterator[str]:
    """Split on ';' outside of quoted literals."""
    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "\\" and quote:
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def _exec_sql(cur, statements: Iterable[str]) -> int:
    count = 0
    for stmt in statements:
        cur.execute(stmt)
        count += 1
    return count


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def _apply_file(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(_strip_comments(Path(path).read_text(encoding="utf-8")))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = _exec_sql(cur, _iter_sql_statements(sql))
        conn.commit()
        return count
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _apply_file(db_config, schema_path)
    logger.info("Applied %s schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _apply_file(db_config, seed_path)
    logger.info("Applied %s seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one ADMIN and one USER account plus a demo task assigned to the USER."""
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(name: str, email: str, password: str, role: str) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, role=%s, status='ACTIVE' WHERE email=%s",
                    (name, password_hash, role, email),
                )
                return int(existing["user_id"])
            cur.execute(
                "INSERT INTO users (name, email, password_hash, role, status) VALUES (%s, %s, %s, %s, 'ACTIVE')",
                (name, email, password_hash, role),
            )
            return int(cur.lastrowid)

        admin_id = upsert_user(*DEMO_ADMIN)
        user_id = upsert_user(*DEMO_USER)

        cur.execute("SELECT task_id FROM tasks WHERE title=%s", ("Demo article",))
        if not cur.fetchone():
            cur.execute(
                """
                INSERT INTO tasks (title, description, amount, status, assigned_to_id, created_by_id)
                VALUES (%s, %s, %s, 'PENDING', %s, %s)
                """,
                ("Demo article", "Seeded task", "1000.00", user_id, admin_id),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
