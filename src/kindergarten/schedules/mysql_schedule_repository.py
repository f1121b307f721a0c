from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduleItem
from .repository import ScheduleRepository

_SELECT = """
    SELECT ds.schedule_id, ds.group_id, ds.start_time, ds.end_time, ds.action, g.group_name
    FROM daily_schedule ds
    LEFT JOIN child_groups g ON g.group_id = ds.group_id
"""


def _to_item(r: dict) -> ScheduleItem:
    return ScheduleItem(
        schedule_id=int(r["schedule_id"]),
        group_id=int(r["group_id"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        action=r["action"],
        group_name=r.get("group_name"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ScheduleItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY g.group_name, ds.start_time")
            return [_to_item(r) for r in fetchall(cur)]

    def list_for_group(self, group_id: int) -> Sequence[ScheduleItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ds.group_id=%s ORDER BY ds.start_time", (int(group_id),))
            return [_to_item(r) for r in fetchall(cur)]

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ds.schedule_id=%s", (int(schedule_id),))
            row = fetchone(cur)
            return _to_item(row) if row else None

    def create(self, *, group_id: int, start_time: time, end_time: time, action: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO daily_schedule(group_id, start_time, end_time, action) VALUES(%s,%s,%s,%s)",
                (int(group_id), start_time, end_time, action),
            )
            return int(cur.lastrowid)

    def update(self, schedule_id: int, *, group_id: int, start_time: time, end_time: time, action: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_schedule SET group_id=%s, start_time=%s, end_time=%s, action=%s
                WHERE schedule_id=%s
                """,
                (int(group_id), start_time, end_time, action, int(schedule_id)),
            )
            return cur.rowcount > 0

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM daily_schedule WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0
