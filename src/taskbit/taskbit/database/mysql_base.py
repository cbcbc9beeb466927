from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any) -> Decimal:
    """Normalize SUM()/DECIMAL results (None, float, Decimal) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal("0.01"))


class WhereBuilder:
    """Collects `AND`-joined SQL clauses with their parameters."""

    def __init__(self, *base_clauses: str):
        self._clauses: list[str] = list(base_clauses) or ["1=1"]
        self._params: list[object] = []

    def add(self, clause: str, *params: object) -> "WhereBuilder":
        self._clauses.append(clause)
        self._params.extend(params)
        return self

    def add_search(self, columns: Sequence[str], pattern: Optional[str]) -> "WhereBuilder":
        if pattern:
            ors = " OR ".join(f"LOWER({c}) LIKE %s" for c in columns)
            self.add(f"({ors})", *([pattern] * len(columns)))
        return self

    def add_period(self, column: str, period) -> "WhereBuilder":
        """Apply a `CalendarFilter` to `column`."""
        bounds = period.bounds()
        if bounds is not None:
            self.add(f"({column} >= %s AND {column} < %s)", *bounds)
        elif period.month is not None:
            self.add(f"MONTH({column})=%s", period.month)
        return self

    def build(self) -> Tuple[str, list]:
        return " AND ".join(self._clauses), list(self._params)
