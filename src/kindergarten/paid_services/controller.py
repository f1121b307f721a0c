from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    svc = container.paid_service_service

    @app.get("/api/services")
    @login_required
    def services_list():
        return jsonify(svc.list_services())

    @app.get("/api/services/<int:service_id>")
    @login_required
    def services_get(service_id: int):
        return jsonify(svc.get_service(service_id))

    @app.post("/api/services")
    @roles_required(Role.ADMIN)
    def services_create():
        return jsonify(svc.create_service(current_user(), json_body())), 201

    @app.put("/api/services/<int:service_id>")
    @roles_required(Role.ADMIN)
    def services_update(service_id: int):
        return jsonify(svc.update_service(current_user(), service_id, json_body()))

    @app.delete("/api/services/<int:service_id>")
    @roles_required(Role.ADMIN)
    def services_delete(service_id: int):
        svc.delete_service(current_user(), service_id)
        return jsonify({"message": "Service deleted", "service_id": service_id})

    @app.get("/api/services/requests")
    @login_required
    def services_requests():
        return jsonify(svc.list_applications(current_user()))

    @app.post("/api/services/requests")
    @roles_required(Role.PARENT)
    def services_request_create():
        return jsonify(svc.apply(current_user(), json_body())), 201

    @app.put("/api/services/requests/<int:application_id>/approve")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def services_request_approve(application_id: int):
        return jsonify(svc.approve(current_user(), application_id, json_body()))

    @app.put("/api/services/requests/<int:application_id>/reject")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def services_request_reject(application_id: int):
        return jsonify(svc.reject(current_user(), application_id))

    @app.delete("/api/services/requests/<int:application_id>")
    @login_required
    def services_request_delete(application_id: int):
        svc.delete_application(current_user(), application_id)
        return jsonify({"message": "Application deleted", "application_id": application_id})

    @app.get("/api/services/<int:service_id>/attendance")
    @login_required
    def services_attendance(service_id: int):
        return jsonify(svc.list_attendance(service_id))

    @app.post("/api/services/<int:service_id>/attendance")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def services_attendance_mark(service_id: int):
        return jsonify(svc.mark_attendance(current_user(), service_id, json_body())), 201
