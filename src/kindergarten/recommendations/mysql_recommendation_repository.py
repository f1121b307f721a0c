from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Recommendation, SendDetails
from .repository import RecommendationRepository

_SELECT = """
    SELECT r.recommendation_id, r.child_id, r.user_id, r.recommendation_text, r.date, r.is_sent, r.sent_at,
           c.parent_id, c.name AS child_name,
           u.first_name AS author_first_name, u.last_name AS author_last_name, u.role AS author_role
    FROM recommendations r
    LEFT JOIN children c ON c.child_id = r.child_id
    LEFT JOIN users u ON u.user_id = r.user_id
"""


def _to_recommendation(r: dict) -> Recommendation:
    author = None
    if r.get("author_first_name"):
        author = f"{r['author_first_name']} {r['author_last_name']}"
    return Recommendation(
        recommendation_id=int(r["recommendation_id"]),
        child_id=int(r["child_id"]),
        user_id=int(r["user_id"]),
        recommendation_text=r["recommendation_text"],
        date=r["date"],
        is_sent=bool(r.get("is_sent")),
        sent_at=r.get("sent_at"),
        parent_id=r.get("parent_id"),
        child_name=r.get("child_name"),
        author_name=author,
        author_role=r.get("author_role"),
    )


class MySQLRecommendationRepository(RecommendationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Recommendation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY r.date DESC, r.recommendation_id DESC")
            return [_to_recommendation(r) for r in fetchall(cur)]

    def list_for_child(self, child_id: int) -> Sequence[Recommendation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE r.child_id=%s ORDER BY r.date DESC, r.recommendation_id DESC", (int(child_id),)
            )
            return [_to_recommendation(r) for r in fetchall(cur)]

    def get_by_id(self, recommendation_id: int) -> Optional[Recommendation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE r.recommendation_id=%s", (int(recommendation_id),))
            row = fetchone(cur)
            return _to_recommendation(row) if row else None

    def create(self, *, child_id: int, user_id: int, text: str, day: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO recommendations(child_id, user_id, recommendation_text, date) VALUES(%s,%s,%s,%s)",
                (int(child_id), int(user_id), text, day),
            )
            return int(cur.lastrowid)

    def update(self, recommendation_id: int, *, text: str, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE recommendations SET recommendation_text=%s, date=%s WHERE recommendation_id=%s",
                (text, day, int(recommendation_id)),
            )
            return cur.rowcount > 0

    def delete(self, recommendation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM recommendations WHERE recommendation_id=%s", (int(recommendation_id),))
            return cur.rowcount > 0

    def delete_for_child(self, child_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM recommendations WHERE child_id=%s", (int(child_id),))
            return int(cur.rowcount)

    def get_send_details(self, recommendation_id: int) -> Optional[SendDetails]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.recommendation_id, r.child_id, r.user_id, r.recommendation_text, r.date, r.is_sent,
                       r.sent_at, c.parent_id, c.name AS child_name,
                       u.first_name AS author_first_name, u.last_name AS author_last_name, u.role AS author_role,
                       p.email AS parent_email, p.first_name AS parent_first_name, p.last_name AS parent_last_name
                FROM recommendations r
                JOIN children c ON c.child_id = r.child_id
                JOIN users u ON u.user_id = r.user_id
                LEFT JOIN users p ON p.user_id = c.parent_id
                WHERE r.recommendation_id=%s
                """,
                (int(recommendation_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            parent_name = None
            if row.get("parent_first_name"):
                parent_name = f"{row['parent_first_name']} {row['parent_last_name']}"
            return SendDetails(
                recommendation=_to_recommendation(row),
                parent_email=row.get("parent_email"),
                parent_name=parent_name,
            )

    def mark_sent(self, recommendation_id: int, *, sent_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE recommendations SET is_sent=1, sent_at=%s WHERE recommendation_id=%s",
                (sent_at, int(recommendation_id)),
            )
            return cur.rowcount > 0
