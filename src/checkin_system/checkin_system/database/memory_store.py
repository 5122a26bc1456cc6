from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import (
    UQ_ATTENDEE_BADGE,
    UQ_ATTENDEE_EVENT_EMAIL,
    UQ_CHECKIN_ATTENDEE_TYPE,
    UQ_EVENT_CODE,
    DuplicateKeyError,
)

Row = Dict[str, Any]

# table -> [(constraint name, columns)]; NULL in any column skips the check (as in MySQL).
UNIQUE_KEYS: Dict[str, List[Tuple[str, Tuple[str, ...]]]] = {
    "events": [(UQ_EVENT_CODE, ("event_code",))],
    "attendees": [
        (UQ_ATTENDEE_BADGE, ("badge_uid",)),
        (UQ_ATTENDEE_EVENT_EMAIL, ("event_id", "email")),
    ],
    "check_ins": [(UQ_CHECKIN_ATTENDEE_TYPE, ("attendee_id", "check_in_type"))],
}

# parent table -> [(child table, foreign key column)]
CASCADES: Dict[str, List[Tuple[str, str]]] = {
    "events": [("attendees", "event_id")],
    "attendees": [("check_ins", "attendee_id")],
}


class MemoryStore:
    """Thread-safe in-memory relational store used by the ``memory`` backend.

    Exposes the five primitives the repositories rely on (find, query,
    insert, update, delete) and enforces the same unique keys as
    database/schema.sql. Every primitive runs under one lock, so a unique
    check and the write that follows it are atomic.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: Dict[str, Dict[int, Row]] = {name: {} for name in UNIQUE_KEYS}
        self._next_id: Dict[str, int] = {name: 1 for name in UNIQUE_KEYS}

    def _table(self, name: str) -> Dict[int, Row]:
        try:
            return self._tables[name]
        except KeyError:
            raise ValueError(f"Unknown table: {name}") from None

    def _check_unique(self, table: str, row: Mapping[str, Any], *, ignore_id: Optional[int] = None) -> None:
        for constraint, columns in UNIQUE_KEYS.get(table, []):
            key = tuple(row.get(c) for c in columns)
            if any(v is None for v in key):
                continue
            for other_id, other in self._table(table).items():
                if other_id == ignore_id:
                    continue
                if tuple(other.get(c) for c in columns) == key:
                    raise DuplicateKeyError(constraint)

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
        return all(row.get(k) == v for k, v in filters.items())

    def find(self, table: str, **filters: Any) -> Optional[Row]:
        with self._lock:
            for row in self._table(table).values():
                if self._matches(row, filters):
                    return copy.deepcopy(row)
            return None

    def query(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        where: Optional[Callable[[Row], bool]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Row]:
        with self._lock:
            rows = [
                copy.deepcopy(r)
                for r in self._table(table).values()
                if self._matches(r, filters or {}) and (where is None or where(r))
            ]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by), r.get("id")), reverse=descending)
        rows = rows[int(offset):]
        if limit is not None:
            rows = rows[: int(limit)]
        return rows

    def count(self, table: str, filters: Optional[Mapping[str, Any]] = None, *, where: Optional[Callable[[Row], bool]] = None) -> int:
        return len(self.query(table, filters, where=where))

    def insert(self, table: str, fields: Mapping[str, Any]) -> Row:
        with self._lock:
            row = dict(fields)
            self._check_unique(table, row)
            row_id = self._next_id[table]
            self._next_id[table] += 1
            row["id"] = row_id
            self._table(table)[row_id] = row
            return copy.deepcopy(row)

    def update(self, table: str, row_id: int, fields: Mapping[str, Any]) -> Optional[Row]:
        with self._lock:
            current = self._table(table).get(int(row_id))
            if current is None:
                return None
            merged = {**current, **dict(fields), "id": current["id"]}
            self._check_unique(table, merged, ignore_id=current["id"])
            self._table(table)[current["id"]] = merged
            return copy.deepcopy(merged)

    def delete(self, table: str, row_id: int) -> bool:
        with self._lock:
            row = self._table(table).pop(int(row_id), None)
            if row is None:
                return False
            for child_table, fk in CASCADES.get(table, []):
                for child_id in [cid for cid, c in self._table(child_table).items() if c.get(fk) == row["id"]]:
                    self.delete(child_table, child_id)
            return True

    def ids(self, table: str, filters: Optional[Mapping[str, Any]] = None) -> Sequence[int]:
        return [r["id"] for r in self.query(table, filters)]

    def ping(self) -> None:
        with self._lock:
            return None
