from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    svc = container.schedule_service

    @app.get("/api/schedule/all")
    @login_required
    def schedule_all():
        return jsonify([i.to_dict() for i in svc.list_all()])

    @app.get("/api/schedule/group/<int:group_id>")
    @login_required
    def schedule_group(group_id: int):
        return jsonify([i.to_dict() for i in svc.for_group(group_id)])

    @app.post("/api/schedule")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def schedule_create():
        return jsonify(svc.create(current_user(), json_body()).to_dict()), 201

    @app.put("/api/schedule/<int:schedule_id>")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def schedule_update(schedule_id: int):
        return jsonify(svc.update(current_user(), schedule_id, json_body()).to_dict())

    @app.delete("/api/schedule/<int:schedule_id>")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def schedule_delete(schedule_id: int):
        svc.delete(current_user(), schedule_id)
        return jsonify({"message": "Schedule item deleted", "schedule_id": schedule_id})
