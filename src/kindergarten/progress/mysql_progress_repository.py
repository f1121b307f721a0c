from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SKILL_FIELDS, ProgressReport
from .repository import ProgressRepository

_VALUE_COLUMNS = SKILL_FIELDS + ("height_cm", "weight_kg", "details")

_SELECT = f"""
    SELECT p.report_id, p.child_id, p.report_date, {', '.join('p.' + c for c in _VALUE_COLUMNS)},
           c.name AS child_name
    FROM progress_reports p
    JOIN children c ON c.child_id = p.child_id
"""


def _to_report(r: dict) -> ProgressReport:
    def _num(key):
        return float(r[key]) if r.get(key) is not None else None

    def _score(key):
        return int(r[key]) if r.get(key) is not None else None

    return ProgressReport(
        report_id=int(r["report_id"]),
        child_id=int(r["child_id"]),
        report_date=r["report_date"],
        height_cm=_num("height_cm"),
        weight_kg=_num("weight_kg"),
        details=r.get("details"),
        child_name=r.get("child_name"),
        **{f: _score(f) for f in SKILL_FIELDS},
    )


class MySQLProgressRepository(ProgressRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_child(self, child_id: int) -> Sequence[ProgressReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.child_id=%s ORDER BY p.report_date", (int(child_id),))
            return [_to_report(r) for r in fetchall(cur)]

    def latest_for_group(self, group_id: int) -> Sequence[ProgressReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE c.group_id=%s
                  AND p.report_date = (
                      SELECT MAX(p2.report_date) FROM progress_reports p2 WHERE p2.child_id = p.child_id
                  )
                ORDER BY c.name
                """,
                (int(group_id),),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def get_by_id(self, report_id: int) -> Optional[ProgressReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.report_id=%s", (int(report_id),))
            row = fetchone(cur)
            return _to_report(row) if row else None

    def upsert(self, *, child_id: int, report_date: date, values: dict) -> int:
        columns = ", ".join(_VALUE_COLUMNS)
        marks = ",".join(["%s"] * len(_VALUE_COLUMNS))
        updates = ", ".join(f"{c}=VALUES({c})" for c in _VALUE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO progress_reports(child_id, report_date, {columns})
                VALUES(%s,%s,{marks})
                ON DUPLICATE KEY UPDATE {updates}, report_id=LAST_INSERT_ID(report_id)
                """,
                (int(child_id), report_date, *[values.get(c) for c in _VALUE_COLUMNS]),
            )
            return int(cur.lastrowid)

    def update(self, report_id: int, *, values: dict) -> bool:
        columns = [c for c in _VALUE_COLUMNS if c in values]
        if not columns:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE progress_reports SET {', '.join(f'{c}=%s' for c in columns)} WHERE report_id=%s",
                (*[values[c] for c in columns], int(report_id)),
            )
            return cur.rowcount > 0

    def delete(self, report_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM progress_reports WHERE report_id=%s", (int(report_id),))
            return cur.rowcount > 0
