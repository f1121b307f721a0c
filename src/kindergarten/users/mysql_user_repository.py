from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, password_hash, role, first_name, last_name, phone, photo_path, created_at"
_UPDATABLE = ("email", "first_name", "last_name", "phone", "role")


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row.get("phone"),
        photo_path=row.get("photo_path"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY last_name, first_name")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY last_name, first_name",
                    (role.value,),
                )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        role: Role,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, password_hash, role, first_name, last_name, phone)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (email, password_hash, role.value, first_name, last_name, phone),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, *, changes: dict) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column in _UPDATABLE:
            if column in changes:
                value = changes[column]
                sets.append(f"{column}=%s")
                params.append(value.value if isinstance(value, Role) else value)
        if not sets:
            return False
        params.append(int(user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params))
            return cur.rowcount > 0

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def set_photo_path(self, user_id: int, *, photo_path: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET photo_path=%s WHERE user_id=%s", (photo_path, int(user_id)))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_parents_with_children(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.email, u.first_name, u.last_name, u.phone,
                       c.child_id, c.name AS child_name, c.group_id
                FROM users u
                LEFT JOIN children c ON c.parent_id = u.user_id
                WHERE u.role='parent'
                ORDER BY u.last_name, u.first_name, c.name
                """
            )
            rows = fetchall(cur)

        out: dict[int, dict] = {}
        for r in rows:
            parent = out.get(r["user_id"])
            if parent is None:
                parent = {
                    "id": int(r["user_id"]),
                    "email": r["email"],
                    "first_name": r["first_name"],
                    "last_name": r["last_name"],
                    "phone": r.get("phone"),
                    "children": [],
                }
                out[r["user_id"]] = parent
            if r.get("child_id") is not None:
                parent["children"].append(
                    {"child_id": int(r["child_id"]), "name": r["child_name"], "group_id": r.get("group_id")}
                )
        return list(out.values())

    def list_teachers_with_groups(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.email, u.first_name, u.last_name, u.phone,
                       g.group_id, g.group_name
                FROM users u
                LEFT JOIN group_teachers gt ON gt.teacher_id = u.user_id
                LEFT JOIN child_groups g ON g.group_id = gt.group_id
                WHERE u.role='teacher'
                ORDER BY u.last_name, u.first_name, g.group_name
                """
            )
            rows = fetchall(cur)

        out: dict[int, dict] = {}
        for r in rows:
            teacher = out.setdefault(
                r["user_id"],
                {
                    "id": int(r["user_id"]),
                    "email": r["email"],
                    "first_name": r["first_name"],
                    "last_name": r["last_name"],
                    "phone": r.get("phone"),
                    "groups": [],
                },
            )
            if r.get("group_id") is not None:
                teacher["groups"].append({"group_id": int(r["group_id"]), "group_name": r["group_name"]})
        return list(out.values())
