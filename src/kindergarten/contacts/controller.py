from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.contact_service

    @app.get("/api/contacts")
    def contacts_info():
        return jsonify(svc.contact_info())

    @app.get("/api/contacts/staff")
    def contacts_staff():
        return jsonify(svc.staff(role=request.args.get("role")))
