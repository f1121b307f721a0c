from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body, query_date, query_int
from ..common.validators import require_date
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.post("/api/attendance/mark")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_mark():
        data = json_body()
        if "records" in data:
            return jsonify(svc.mark_many(current_user(), data["records"]))
        return jsonify(svc.mark(current_user(), data))

    @app.get("/api/attendance/group/<int:group_id>")
    @login_required
    def attendance_group(group_id: int):
        records = svc.for_group(current_user(), group_id, start=query_date("start_date"), end=query_date("end_date"))
        return jsonify(records)

    @app.get("/api/attendance/child/<int:child_id>")
    @login_required
    def attendance_child(child_id: int):
        records = svc.for_child(
            current_user(),
            child_id,
            start=query_date("start_date", required=False),
            end=query_date("end_date", required=False),
        )
        return jsonify(records)

    @app.get("/api/attendance/by-date/<day>")
    @login_required
    def attendance_by_date(day: str):
        return jsonify(svc.by_date(current_user(), require_date(day, "date")))

    @app.get("/api/attendance/month")
    @login_required
    def attendance_month():
        records = svc.for_month(
            current_user(),
            year=query_int("year", min_value=2000, max_value=2100),
            month=query_int("month", min_value=1, max_value=12),
        )
        return jsonify(records)

    @app.delete("/api/attendance/<int:attendance_id>")
    @roles_required(Role.ADMIN)
    def attendance_delete(attendance_id: int):
        svc.delete(current_user(), attendance_id)
        return jsonify({"message": "Attendance record deleted", "attendance_id": attendance_id})
