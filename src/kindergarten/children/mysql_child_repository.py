from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Child, ChildInput
from .repository import ChildRepository

_SELECT = """
    SELECT c.child_id, c.name, c.date_of_birth, c.parent_id, c.group_id, c.allergies, c.photo_path,
           g.group_name, u.first_name AS parent_first_name, u.last_name AS parent_last_name
    FROM children c
    LEFT JOIN child_groups g ON g.group_id = c.group_id
    LEFT JOIN users u ON u.user_id = c.parent_id
"""

# Dependent tables cleared before the child row itself (no ON DELETE CASCADE in the schema).
_DEPENDENT_DELETES = (
    "DELETE FROM recommendations WHERE child_id=%s",
    "DELETE FROM attendance WHERE child_id=%s",
    "DELETE FROM progress_reports WHERE child_id=%s",
    "DELETE FROM service_attendance WHERE child_id=%s",
    """
    DELETE sat FROM service_application_teachers sat
    JOIN service_applications sa ON sa.application_id = sat.application_id
    WHERE sa.child_id=%s
    """,
    "DELETE FROM service_applications WHERE child_id=%s",
    "DELETE FROM child_services WHERE child_id=%s",
    "DELETE FROM discounts WHERE child_id=%s",
)


def _parse_allergies(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    items = json.loads(value) if isinstance(value, str) else value
    return tuple(str(x) for x in items)


class MySQLChildRepository(ChildRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _services_by_child(cur, child_ids: Sequence[int]) -> dict[int, list[int]]:
        if not child_ids:
            return {}
        cur.execute(
            f"SELECT child_id, service_id FROM child_services WHERE child_id IN ({placeholders(child_ids)})",
            tuple(child_ids),
        )
        out: dict[int, list[int]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["child_id"]), []).append(int(r["service_id"]))
        return out

    @staticmethod
    def _to_child(row: dict, service_ids: Sequence[int]) -> Child:
        parent_name = None
        if row.get("parent_first_name"):
            parent_name = f"{row['parent_first_name']} {row['parent_last_name']}"
        return Child(
            child_id=int(row["child_id"]),
            name=row["name"],
            date_of_birth=row["date_of_birth"],
            parent_id=row.get("parent_id"),
            group_id=row.get("group_id"),
            allergies=_parse_allergies(row.get("allergies")),
            photo_path=row.get("photo_path"),
            service_ids=tuple(sorted(service_ids)),
            group_name=row.get("group_name"),
            parent_name=parent_name,
        )

    def list_children(
        self,
        *,
        parent_id: Optional[int] = None,
        group_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Child]:
        clauses: list[str] = []
        params: list[object] = []
        if parent_id is not None:
            clauses.append("c.parent_id=%s")
            params.append(int(parent_id))
        if group_ids is not None:
            if not group_ids:
                return []
            clauses.append(f"c.group_id IN ({placeholders(group_ids)})")
            params.extend(int(g) for g in group_ids)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY c.name", tuple(params))
            rows = fetchall(cur)
            services = self._services_by_child(cur, [int(r["child_id"]) for r in rows])
            return [self._to_child(r, services.get(int(r["child_id"]), [])) for r in rows]

    def get_by_id(self, child_id: int) -> Optional[Child]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE c.child_id=%s", (int(child_id),))
            row = fetchone(cur)
            if not row:
                return None
            services = self._services_by_child(cur, [int(child_id)])
            return self._to_child(row, services.get(int(child_id), []))

    @staticmethod
    def _replace_services(cur, child_id: int, service_ids: Sequence[int]) -> None:
        cur.execute("DELETE FROM child_services WHERE child_id=%s", (child_id,))
        for service_id in service_ids:
            cur.execute("INSERT INTO child_services(child_id, service_id) VALUES(%s,%s)", (child_id, int(service_id)))

    def create_child(self, data: ChildInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO children(name, date_of_birth, parent_id, group_id, allergies)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (data.name, data.date_of_birth, data.parent_id, data.group_id, json.dumps(list(data.allergies))),
            )
            child_id = int(cur.lastrowid)
            self._replace_services(cur, child_id, data.service_ids)
            return child_id

    def update_child(self, child_id: int, data: ChildInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT child_id FROM children WHERE child_id=%s FOR UPDATE", (int(child_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE children
                SET name=%s, date_of_birth=%s, parent_id=%s, group_id=%s, allergies=%s
                WHERE child_id=%s
                """,
                (
                    data.name,
                    data.date_of_birth,
                    data.parent_id,
                    data.group_id,
                    json.dumps(list(data.allergies)),
                    int(child_id),
                ),
            )
            self._replace_services(cur, int(child_id), data.service_ids)
            return True

    def set_photo_path(self, child_id: int, *, photo_path: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE children SET photo_path=%s WHERE child_id=%s", (photo_path, int(child_id)))
            return cur.rowcount > 0

    def delete_child(self, child_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            for statement in _DEPENDENT_DELETES:
                cur.execute(statement, (int(child_id),))
            cur.execute("DELETE FROM children WHERE child_id=%s", (int(child_id),))
            return cur.rowcount > 0
