from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body, query_int
from ..container import Container
from ..core.constants import WEEK_NUMBERS
from ..core.enums import Role

_EDITORS = (Role.ADMIN, Role.TEACHER)


def _week() -> int:
    return query_int("week", required=False, min_value=min(WEEK_NUMBERS), max_value=max(WEEK_NUMBERS)) or 1


def register(app: Flask, container: Container) -> None:
    svc = container.menu_service

    @app.get("/api/menu/dishes")
    @login_required
    def menu_dishes():
        return jsonify(svc.list_dishes(group_id=query_int("group_id", required=False, min_value=1)))

    @app.post("/api/menu/dishes")
    @roles_required(*_EDITORS)
    def menu_dish_create():
        return jsonify(svc.create_dish(current_user(), json_body())), 201

    @app.put("/api/menu/dishes/<int:menu_id>")
    @roles_required(*_EDITORS)
    def menu_dish_update(menu_id: int):
        return jsonify(svc.update_dish(current_user(), menu_id, json_body()))

    @app.delete("/api/menu/dishes/<int:menu_id>")
    @roles_required(*_EDITORS)
    def menu_dish_delete(menu_id: int):
        svc.delete_dish(current_user(), menu_id)
        return jsonify({"message": "Dish deleted", "menu_id": menu_id})

    @app.get("/api/menu/weekly/<int:group_id>")
    @login_required
    def menu_weekly(group_id: int):
        return jsonify(svc.placements(group_id, _week()))

    @app.get("/api/menu/weekly/<int:group_id>/grid")
    @login_required
    def menu_weekly_grid(group_id: int):
        week = _week()
        return jsonify({"group_id": group_id, "week_number": week, **svc.grid(group_id, week).to_dict()})

    @app.post("/api/menu/weekly")
    @roles_required(*_EDITORS)
    def menu_placement_create():
        return jsonify(svc.create_placement(current_user(), json_body())), 201

    @app.put("/api/menu/weekly/<int:placement_id>")
    @roles_required(*_EDITORS)
    def menu_placement_update(placement_id: int):
        return jsonify(svc.update_placement(current_user(), placement_id, json_body()))

    @app.delete("/api/menu/weekly/<int:placement_id>")
    @roles_required(*_EDITORS)
    def menu_placement_delete(placement_id: int):
        svc.delete_placement(current_user(), placement_id)
        return jsonify({"message": "Menu placement deleted", "menu_id": placement_id})

    @app.delete("/api/menu/weekly/group/<int:group_id>/week/<int:week_number>")
    @roles_required(*_EDITORS)
    def menu_clear_week(group_id: int, week_number: int):
        removed = svc.clear_week(current_user(), group_id, week_number)
        return jsonify({"message": "Week cleared", "group_id": group_id, "week_number": week_number, "deleted": removed})
