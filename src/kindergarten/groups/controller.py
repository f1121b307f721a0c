from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.get("/api/groups")
    @login_required
    def groups_list():
        return jsonify([g.to_dict() for g in container.group_service.list_groups()])

    @app.get("/api/groups/<int:group_id>")
    @login_required
    def groups_get(group_id: int):
        return jsonify(container.group_service.get_group(group_id).to_dict())

    @app.post("/api/groups")
    @roles_required(Role.ADMIN)
    def groups_create():
        group = container.group_service.create_group(current_user(), json_body())
        return jsonify(group.to_dict()), 201

    @app.put("/api/groups/<int:group_id>")
    @roles_required(Role.ADMIN)
    def groups_update(group_id: int):
        group = container.group_service.update_group(current_user(), group_id, json_body())
        return jsonify(group.to_dict())

    @app.delete("/api/groups/<int:group_id>")
    @roles_required(Role.ADMIN)
    def groups_delete(group_id: int):
        container.group_service.delete_group(current_user(), group_id)
        return jsonify({"message": "Group deleted", "group_id": group_id})

    @app.get("/api/groups/<int:group_id>/children")
    @login_required
    def groups_children(group_id: int):
        return jsonify(container.group_service.list_children(group_id))

    @app.get("/api/groups/<int:group_id>/children/count")
    @login_required
    def groups_children_count(group_id: int):
        return jsonify({"group_id": group_id, "count": container.group_service.count_children(group_id)})
