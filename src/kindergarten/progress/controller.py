from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    svc = container.progress_service

    @app.get("/api/progress/child/<int:child_id>")
    @login_required
    def progress_child(child_id: int):
        return jsonify(svc.for_child(current_user(), child_id))

    @app.get("/api/progress/group/<int:group_id>")
    @roles_required(Role.ADMIN, Role.TEACHER, Role.PSYCHOLOGIST)
    def progress_group(group_id: int):
        return jsonify([r.to_dict() for r in svc.for_group(current_user(), group_id)])

    @app.post("/api/progress")
    @roles_required(Role.ADMIN, Role.PSYCHOLOGIST)
    def progress_save():
        return jsonify(svc.save(current_user(), json_body()).to_dict()), 201

    @app.put("/api/progress/<int:report_id>")
    @roles_required(Role.ADMIN, Role.PSYCHOLOGIST)
    def progress_update(report_id: int):
        return jsonify(svc.update(current_user(), report_id, json_body()).to_dict())

    @app.delete("/api/progress/<int:report_id>")
    @roles_required(Role.ADMIN, Role.PSYCHOLOGIST)
    def progress_delete(report_id: int):
        svc.delete(current_user(), report_id)
        return jsonify({"message": "Progress report deleted", "report_id": report_id})
