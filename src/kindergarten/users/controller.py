from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.post("/api/auth/register")
    def auth_register():
        data = json_body()
        token, user = container.auth_service.register(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            phone=data.get("phone"),
            role=data.get("role"),
        )
        return jsonify({"token": token, "user": user.to_public()}), 201

    @app.post("/api/auth/login")
    def auth_login():
        data = json_body()
        token, user = container.auth_service.login(data.get("email"), data.get("password"))
        return jsonify({"token": token, "user": user.to_public()})

    @app.get("/api/auth/me")
    @login_required
    def auth_me():
        return jsonify(container.auth_service.me(current_user()).to_public())

    @app.get("/api/users")
    @roles_required(Role.ADMIN, Role.PSYCHOLOGIST)
    def users_list():
        users = container.user_service.list_users(role=request.args.get("role"))
        return jsonify([u.to_public() for u in users])

    @app.get("/api/users/me")
    @login_required
    def users_me():
        return jsonify(container.auth_service.me(current_user()).to_public())

    @app.put("/api/users/me")
    @login_required
    def users_update_me():
        user = container.user_service.update_me(current_user(), json_body())
        return jsonify(user.to_public())

    @app.post("/api/users/me/password")
    @login_required
    def users_change_password():
        data = json_body()
        container.user_service.change_password(
            current_user(),
            current_password=data.get("current_password"),
            new_password=data.get("new_password"),
        )
        return jsonify({"message": "Password changed"})

    @app.get("/api/users/parents")
    @login_required
    def users_parents():
        return jsonify(container.user_service.list_parents())

    @app.get("/api/users/teachers")
    @login_required
    def users_teachers():
        return jsonify(container.user_service.list_teachers())

    @app.get("/api/users/<int:user_id>")
    @roles_required(Role.ADMIN, Role.PSYCHOLOGIST)
    def users_get(user_id: int):
        return jsonify(container.user_service.get_user(user_id).to_public())

    @app.post("/api/users")
    @roles_required(Role.ADMIN)
    def users_create():
        user = container.user_service.create_user(current_user(), json_body())
        return jsonify(user.to_public()), 201

    @app.put("/api/users/<int:user_id>")
    @roles_required(Role.ADMIN)
    def users_update(user_id: int):
        user = container.user_service.update_user(current_user(), user_id, json_body())
        return jsonify(user.to_public())

    @app.delete("/api/users/<int:user_id>")
    @roles_required(Role.ADMIN)
    def users_delete(user_id: int):
        container.user_service.delete_user(current_user(), user_id)
        return jsonify({"message": "User deleted"})

    @app.post("/api/users/<int:user_id>/profile-photo")
    @login_required
    def users_profile_photo(user_id: int):
        data = json_body()
        user = container.user_service.upload_profile_photo(
            current_user(), user_id, photo=data.get("photo"), mime_type=data.get("photo_mime_type")
        )
        return jsonify(user.to_public())
