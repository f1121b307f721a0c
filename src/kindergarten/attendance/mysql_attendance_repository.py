from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..children.access import ChildScope
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.child_id, a.date, a.is_present, c.name AS child_name, c.group_id
    FROM attendance a
    JOIN children c ON c.child_id = a.child_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        child_id=int(r["child_id"]),
        date=r["date"],
        is_present=bool(r["is_present"]),
        child_name=r.get("child_name"),
        group_id=r.get("group_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _upsert(cur, child_id: int, day: date, is_present: bool) -> int:
        # LAST_INSERT_ID(expr) makes lastrowid point at the existing row on update.
        cur.execute(
            """
            INSERT INTO attendance(child_id, date, is_present)
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                is_present=VALUES(is_present),
                attendance_id=LAST_INSERT_ID(attendance_id)
            """,
            (int(child_id), day, int(bool(is_present))),
        )
        return int(cur.lastrowid)

    def upsert(self, *, child_id: int, day: date, is_present: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._upsert(cur, child_id, day, is_present)

    def upsert_many(self, records: Sequence[tuple[int, date, bool]]) -> list[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            return [self._upsert(cur, child_id, day, is_present) for child_id, day, is_present in records]

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_for_group(self, group_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE c.group_id=%s AND a.date BETWEEN %s AND %s ORDER BY a.date, c.name",
                (int(group_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_child(self, child_id: int, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
        clauses = ["a.child_id=%s"]
        params: list[object] = [int(child_id)]
        if start is not None:
            clauses.append("a.date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("a.date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY a.date DESC", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def list_range(self, *, start: date, end: date, scope: ChildScope) -> Sequence[AttendanceRecord]:
        clauses = ["a.date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if scope.parent_id is not None:
            clauses.append("c.parent_id=%s")
            params.append(int(scope.parent_id))
        if scope.group_ids is not None:
            if not scope.group_ids:
                return []
            clauses.append(f"c.group_id IN ({placeholders(scope.group_ids)})")
            params.extend(int(g) for g in scope.group_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY a.date, c.name", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
