from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role

_STAFF = (Role.ADMIN, Role.TEACHER, Role.PSYCHOLOGIST)


def register(app: Flask, container: Container) -> None:
    svc = container.recommendation_service

    @app.get("/api/recommendations")
    @login_required
    def recommendations_list():
        return jsonify(svc.list_for_viewer(current_user()))

    @app.get("/api/recommendations/tree")
    @login_required
    def recommendations_tree():
        result = svc.tree(current_user())
        return jsonify(result if isinstance(result, list) else result.to_dict())

    @app.get("/api/recommendations/<int:recommendation_id>")
    @login_required
    def recommendations_get(recommendation_id: int):
        return jsonify(svc.get(current_user(), recommendation_id))

    @app.get("/api/recommendations/child/<int:child_id>")
    @login_required
    def recommendations_child(child_id: int):
        return jsonify(svc.for_child(current_user(), child_id))

    @app.post("/api/recommendations")
    @roles_required(*_STAFF)
    def recommendations_create():
        return jsonify(svc.create(current_user(), json_body())), 201

    @app.put("/api/recommendations/<int:recommendation_id>")
    @roles_required(*_STAFF)
    def recommendations_update(recommendation_id: int):
        return jsonify(svc.update(current_user(), recommendation_id, json_body()))

    @app.delete("/api/recommendations/<int:recommendation_id>")
    @roles_required(*_STAFF)
    def recommendations_delete(recommendation_id: int):
        svc.delete(current_user(), recommendation_id)
        return jsonify({"message": "Recommendation deleted", "recommendation_id": recommendation_id})

    @app.delete("/api/recommendations/child/<int:child_id>")
    @roles_required(Role.ADMIN)
    def recommendations_delete_child(child_id: int):
        removed = svc.delete_for_child(current_user(), child_id)
        return jsonify({"message": "Recommendations deleted", "child_id": child_id, "deleted": removed})

    @app.post("/api/recommendations/<int:recommendation_id>/send")
    @roles_required(*_STAFF)
    def recommendations_send(recommendation_id: int):
        return jsonify(svc.send(current_user(), recommendation_id))
