from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ApplicationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Service, ServiceApplication, ServiceAttendance, ServiceUsage
from .repository import ServiceRepository

_SERVICE_COLUMNS = (
    "service_name",
    "description",
    "price",
    "duration",
    "total_price",
    "days_of_week",
    "time",
    "teachers",
)

_APPLICATION_SELECT = """
    SELECT sa.application_id, sa.child_id, sa.service_id, sa.parent_id, sa.status, sa.comment,
           sa.created_at, sa.decided_by, sa.decided_at, c.name AS child_name, s.service_name
    FROM service_applications sa
    LEFT JOIN children c ON c.child_id = sa.child_id
    LEFT JOIN services s ON s.service_id = sa.service_id
"""


def _to_service(r: dict) -> Service:
    return Service(
        service_id=int(r["service_id"]),
        service_name=r["service_name"],
        description=r.get("description"),
        price=float(r["price"]),
        duration=r.get("duration"),
        total_price=float(r["total_price"]) if r.get("total_price") is not None else None,
        days_of_week=r.get("days_of_week"),
        time=r.get("time"),
        teachers=r.get("teachers"),
    )


class MySQLServiceRepository(ServiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_services(self) -> Sequence[Service]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT service_id, {', '.join(_SERVICE_COLUMNS)} FROM services ORDER BY service_name")
            return [_to_service(r) for r in fetchall(cur)]

    def get_by_id(self, service_id: int) -> Optional[Service]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT service_id, {', '.join(_SERVICE_COLUMNS)} FROM services WHERE service_id=%s",
                (int(service_id),),
            )
            row = fetchone(cur)
            return _to_service(row) if row else None

    def create_service(self, data: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO services({', '.join(_SERVICE_COLUMNS)})
                VALUES({placeholders(_SERVICE_COLUMNS)})
                """,
                tuple(data.get(c) for c in _SERVICE_COLUMNS),
            )
            return int(cur.lastrowid)

    def update_service(self, service_id: int, data: dict) -> bool:
        columns = [c for c in _SERVICE_COLUMNS if c in data]
        if not columns:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE services SET {', '.join(f'{c}=%s' for c in columns)} WHERE service_id=%s",
                tuple(data[c] for c in columns) + (int(service_id),),
            )
            return cur.rowcount > 0

    def delete_service(self, service_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM services WHERE service_id=%s", (int(service_id),))
            return cur.rowcount > 0

    @staticmethod
    def _teachers_by_application(cur, application_ids: Sequence[int]) -> dict[int, list[int]]:
        if not application_ids:
            return {}
        cur.execute(
            f"""
            SELECT application_id, teacher_id FROM service_application_teachers
            WHERE application_id IN ({placeholders(application_ids)})
            """,
            tuple(application_ids),
        )
        out: dict[int, list[int]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["application_id"]), []).append(int(r["teacher_id"]))
        return out

    @staticmethod
    def _to_application(r: dict, teacher_ids: Sequence[int]) -> ServiceApplication:
        return ServiceApplication(
            application_id=int(r["application_id"]),
            child_id=int(r["child_id"]),
            service_id=int(r["service_id"]),
            parent_id=int(r["parent_id"]),
            status=ApplicationStatus(r["status"]),
            comment=r.get("comment"),
            created_at=r.get("created_at"),
            decided_by=r.get("decided_by"),
            decided_at=r.get("decided_at"),
            teacher_ids=tuple(sorted(teacher_ids)),
            child_name=r.get("child_name"),
            service_name=r.get("service_name"),
        )

    def list_applications(self, *, parent_id: Optional[int] = None) -> Sequence[ServiceApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            if parent_id is None:
                cur.execute(_APPLICATION_SELECT + " ORDER BY sa.created_at DESC")
            else:
                cur.execute(_APPLICATION_SELECT + " WHERE sa.parent_id=%s ORDER BY sa.created_at DESC", (int(parent_id),))
            rows = fetchall(cur)
            teachers = self._teachers_by_application(cur, [int(r["application_id"]) for r in rows])
            return [self._to_application(r, teachers.get(int(r["application_id"]), [])) for r in rows]

    def get_application(self, application_id: int) -> Optional[ServiceApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_APPLICATION_SELECT + " WHERE sa.application_id=%s", (int(application_id),))
            row = fetchone(cur)
            if not row:
                return None
            teachers = self._teachers_by_application(cur, [int(application_id)])
            return self._to_application(row, teachers.get(int(application_id), []))

    def create_application(self, *, child_id: int, service_id: int, parent_id: int, comment: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO service_applications(child_id, service_id, parent_id, status, comment)
                VALUES(%s,%s,%s,'pending',%s)
                """,
                (int(child_id), int(service_id), int(parent_id), comment),
            )
            return int(cur.lastrowid)

    def decide_application(
        self,
        application_id: int,
        *,
        status: ApplicationStatus,
        decided_by: int,
        decided_at: datetime,
        teacher_ids: Sequence[int] = (),
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE service_applications
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE application_id=%s AND status='pending'
                """,
                (status.value, int(decided_by), decided_at, int(application_id)),
            )
            if cur.rowcount == 0:
                return False

            if status == ApplicationStatus.APPROVED:
                cur.execute(
                    """
                    INSERT IGNORE INTO child_services(child_id, service_id)
                    SELECT child_id, service_id FROM service_applications WHERE application_id=%s
                    """,
                    (int(application_id),),
                )
                for teacher_id in teacher_ids:
                    cur.execute(
                        "INSERT INTO service_application_teachers(application_id, teacher_id) VALUES(%s,%s)",
                        (int(application_id), int(teacher_id)),
                    )
            return True

    def delete_application(self, application_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM service_application_teachers WHERE application_id=%s", (int(application_id),))
            cur.execute("DELETE FROM service_applications WHERE application_id=%s", (int(application_id),))
            return cur.rowcount > 0

    def list_attendance(self, service_id: int) -> Sequence[ServiceAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sa.service_id, sa.child_id, sa.date, sa.is_present, c.name AS child_name
                FROM service_attendance sa
                JOIN children c ON c.child_id = sa.child_id
                WHERE sa.service_id=%s
                ORDER BY sa.date DESC, c.name
                """,
                (int(service_id),),
            )
            return [
                ServiceAttendance(
                    service_id=int(r["service_id"]),
                    child_id=int(r["child_id"]),
                    date=r["date"],
                    is_present=bool(r["is_present"]),
                    child_name=r.get("child_name"),
                )
                for r in fetchall(cur)
            ]

    def upsert_attendance(self, *, service_id: int, child_id: int, day: date, is_present: bool) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO service_attendance(service_id, child_id, date, is_present)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE is_present=VALUES(is_present)
                """,
                (int(service_id), int(child_id), day, int(bool(is_present))),
            )

    def usage_for_children(self, child_ids: Sequence[int], *, start: date, end: date) -> Sequence[ServiceUsage]:
        if not child_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT cs.child_id, s.service_id, s.service_name, s.price,
                       COUNT(sa.service_attendance_id) AS attended_lessons
                FROM child_services cs
                JOIN services s ON s.service_id = cs.service_id
                LEFT JOIN service_attendance sa
                       ON sa.service_id = cs.service_id
                      AND sa.child_id = cs.child_id
                      AND sa.is_present = 1
                      AND sa.date BETWEEN %s AND %s
                WHERE cs.child_id IN ({placeholders(child_ids)})
                GROUP BY cs.child_id, s.service_id, s.service_name, s.price
                ORDER BY cs.child_id, s.service_name
                """,
                (start, end, *[int(c) for c in child_ids]),
            )
            return [
                ServiceUsage(
                    child_id=int(r["child_id"]),
                    service_id=int(r["service_id"]),
                    service_name=r["service_name"],
                    price_per_lesson=float(r["price"]),
                    attended_lessons=int(r["attended_lessons"] or 0),
                )
                for r in fetchall(cur)
            ]
