from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_user, login_required, roles_required
from ..common.http import json_body, query_date, query_int
from ..common.validators import optional_int
from ..container import Container
from ..core.enums import Role
from .service import discount_types


def register(app: Flask, container: Container) -> None:
    svc = container.finance_service

    @app.get("/api/finance")
    @roles_required(Role.ADMIN)
    def finance_payments():
        payments = svc.list_payments(
            current_user(),
            start=query_date("start_date", required=False),
            end=query_date("end_date", required=False),
            user_id=optional_int(request.args.get("user_id"), "user_id"),
        )
        return jsonify(payments)

    @app.get("/api/finance/<int:payment_id>")
    @roles_required(Role.ADMIN)
    def finance_payment_get(payment_id: int):
        return jsonify(svc.get_payment(current_user(), payment_id))

    @app.post("/api/finance")
    @roles_required(Role.ADMIN)
    def finance_payment_create():
        return jsonify(svc.create_payment(current_user(), json_body())), 201

    @app.put("/api/finance/<int:payment_id>")
    @roles_required(Role.ADMIN)
    def finance_payment_update(payment_id: int):
        return jsonify(svc.update_payment(current_user(), payment_id, json_body()))

    @app.delete("/api/finance/<int:payment_id>")
    @roles_required(Role.ADMIN)
    def finance_payment_delete(payment_id: int):
        svc.delete_payment(current_user(), payment_id)
        return jsonify({"message": "Payment deleted", "payment_id": payment_id})

    @app.get("/api/finance/stats/summary")
    @roles_required(Role.ADMIN)
    def finance_stats():
        stats = svc.stats(
            current_user(),
            start=query_date("start_date", required=False),
            end=query_date("end_date", required=False),
        )
        return jsonify(stats)

    @app.get("/api/finance/billing")
    @roles_required(Role.ADMIN, Role.PARENT)
    def finance_billing():
        report = svc.billing(
            current_user(),
            year=query_int("year", min_value=2000, max_value=2100),
            month=query_int("month", min_value=1, max_value=12),
        )
        return jsonify(report)

    @app.get("/api/finance/discounts")
    @roles_required(Role.ADMIN, Role.PARENT)
    def finance_discounts():
        discounts = svc.list_discounts(
            current_user(),
            year=query_int("year", min_value=2000, max_value=2100),
            month=query_int("month", min_value=1, max_value=12),
        )
        return jsonify(discounts)

    @app.put("/api/finance/discounts")
    @roles_required(Role.ADMIN)
    def finance_discount_save():
        return jsonify(svc.save_discount(current_user(), json_body()))

    @app.delete("/api/finance/discounts/<int:discount_id>")
    @roles_required(Role.ADMIN)
    def finance_discount_delete(discount_id: int):
        svc.delete_discount(current_user(), discount_id)
        return jsonify({"message": "Discount deleted", "discount_id": discount_id})

    @app.get("/api/finance/discount-types")
    @login_required
    def finance_discount_types():
        return jsonify(discount_types())
