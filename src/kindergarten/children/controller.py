from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body, query_date
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.get("/api/children")
    @login_required
    def children_list():
        return jsonify([c.to_dict() for c in container.child_service.list_children(current_user())])

    @app.get("/api/children/<int:child_id>")
    @login_required
    def children_get(child_id: int):
        return jsonify(container.child_service.get_child(current_user(), child_id).to_dict())

    @app.post("/api/children")
    @roles_required(Role.ADMIN)
    def children_create():
        child = container.child_service.create_child(current_user(), json_body())
        return jsonify(child.to_dict()), 201

    @app.put("/api/children/<int:child_id>")
    @roles_required(Role.ADMIN)
    def children_update(child_id: int):
        child = container.child_service.update_child(current_user(), child_id, json_body())
        return jsonify(child.to_dict())

    @app.delete("/api/children/<int:child_id>")
    @roles_required(Role.ADMIN)
    def children_delete(child_id: int):
        container.child_service.delete_child(current_user(), child_id)
        return jsonify({"message": "Child deleted", "child_id": child_id})

    @app.get("/api/children/<int:child_id>/services-cost")
    @login_required
    def children_services_cost(child_id: int):
        report = container.child_service.services_cost(
            current_user(), child_id, start=query_date("start_date"), end=query_date("end_date")
        )
        return jsonify(report)
