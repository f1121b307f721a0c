from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Group
from .repository import GroupRepository

_SELECT = """
    SELECT g.group_id, g.group_name, g.age_range, g.is_paid,
           (SELECT COUNT(*) FROM children c WHERE c.group_id = g.group_id) AS children_count
    FROM child_groups g
"""


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _teachers_by_group(cur, group_ids: Sequence[int]) -> dict[int, list[dict]]:
        if not group_ids:
            return {}
        cur.execute(
            f"""
            SELECT gt.group_id, u.user_id, u.first_name, u.last_name
            FROM group_teachers gt
            JOIN users u ON u.user_id = gt.teacher_id
            WHERE gt.group_id IN ({placeholders(group_ids)})
            ORDER BY u.last_name, u.first_name
            """,
            tuple(group_ids),
        )
        out: dict[int, list[dict]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["group_id"]), []).append(
                {"id": int(r["user_id"]), "name": f"{r['first_name']} {r['last_name']}"}
            )
        return out

    @staticmethod
    def _to_group(row: dict, teachers: list[dict]) -> Group:
        return Group(
            group_id=int(row["group_id"]),
            group_name=row["group_name"],
            age_range=row.get("age_range"),
            is_paid=bool(row.get("is_paid")),
            teachers=tuple(teachers),
            children_count=int(row.get("children_count") or 0),
        )

    def list_groups(self) -> Sequence[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY g.group_name")
            rows = fetchall(cur)
            teachers = self._teachers_by_group(cur, [int(r["group_id"]) for r in rows])
            return [self._to_group(r, teachers.get(int(r["group_id"]), [])) for r in rows]

    def _get_where(self, clause: str, value) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {clause}", (value,))
            row = fetchone(cur)
            if not row:
                return None
            teachers = self._teachers_by_group(cur, [int(row["group_id"])])
            return self._to_group(row, teachers.get(int(row["group_id"]), []))

    def get_by_id(self, group_id: int) -> Optional[Group]:
        return self._get_where("g.group_id=%s", int(group_id))

    def get_by_name(self, group_name: str) -> Optional[Group]:
        return self._get_where("g.group_name=%s", group_name)

    @staticmethod
    def _replace_teachers(cur, group_id: int, teacher_ids: Sequence[int]) -> None:
        cur.execute("DELETE FROM group_teachers WHERE group_id=%s", (group_id,))
        for teacher_id in teacher_ids:
            cur.execute("INSERT INTO group_teachers(group_id, teacher_id) VALUES(%s,%s)", (group_id, int(teacher_id)))

    def create_group(self, *, group_name: str, age_range: Optional[str], is_paid: bool, teacher_ids: Sequence[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO child_groups(group_name, age_range, is_paid) VALUES(%s,%s,%s)",
                (group_name, age_range, int(bool(is_paid))),
            )
            group_id = int(cur.lastrowid)
            self._replace_teachers(cur, group_id, teacher_ids)
            return group_id

    def update_group(
        self,
        group_id: int,
        *,
        group_name: str,
        age_range: Optional[str],
        is_paid: bool,
        teacher_ids: Optional[Sequence[int]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id FROM child_groups WHERE group_id=%s FOR UPDATE", (int(group_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE child_groups SET group_name=%s, age_range=%s, is_paid=%s WHERE group_id=%s",
                (group_name, age_range, int(bool(is_paid)), int(group_id)),
            )
            if teacher_ids is not None:
                self._replace_teachers(cur, int(group_id), teacher_ids)
            return True

    def delete_group(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM group_teachers WHERE group_id=%s", (int(group_id),))
            cur.execute("DELETE FROM daily_schedule WHERE group_id=%s", (int(group_id),))
            cur.execute("DELETE FROM weekly_menu WHERE group_id=%s", (int(group_id),))
            cur.execute("DELETE FROM child_groups WHERE group_id=%s", (int(group_id),))
            return cur.rowcount > 0

    def count_children(self, group_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM children WHERE group_id=%s", (int(group_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def list_children(self, group_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.child_id, c.name, c.date_of_birth, c.allergies, c.photo_path,
                       c.parent_id, u.first_name AS parent_first_name, u.last_name AS parent_last_name,
                       u.phone AS parent_phone
                FROM children c
                LEFT JOIN users u ON u.user_id = c.parent_id
                WHERE c.group_id=%s
                ORDER BY c.name
                """,
                (int(group_id),),
            )
            out: list[dict] = []
            for r in fetchall(cur):
                allergies = r.get("allergies")
                out.append(
                    {
                        "child_id": int(r["child_id"]),
                        "name": r["name"],
                        "date_of_birth": r["date_of_birth"],
                        "allergies": json.loads(allergies) if allergies else [],
                        "photo_path": r.get("photo_path"),
                        "parent_id": r.get("parent_id"),
                        "parent_name": (
                            f"{r['parent_first_name']} {r['parent_last_name']}" if r.get("parent_first_name") else None
                        ),
                        "parent_phone": r.get("parent_phone"),
                    }
                )
            return out

    def group_ids_for_teacher(self, teacher_id: int) -> list[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id FROM group_teachers WHERE teacher_id=%s", (int(teacher_id),))
            return [int(r["group_id"]) for r in fetchall(cur)]
