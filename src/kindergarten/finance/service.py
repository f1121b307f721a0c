from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..children.access import ChildAccessPolicy
from ..common.datetime_utils import month_bounds
from ..common.validators import (
    FieldErrors,
    optional_number,
    optional_str,
    require_choice,
    require_date,
    require_int,
    require_number,
)
from ..core.constants import DISCOUNT_TYPES
from ..core.enums import DiscountType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ReferenceIntegrityError
from ..paid_services.repository import ServiceRepository
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .calculator.base import FeeCalculator, FeeInput
from .calculator.standard_calculator import StandardFeeCalculator
from .model import Discount, Payment
from .repository import FinanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingReport:
    year: int
    month: int
    bills: list[dict]
    total: float


def discount_types() -> list[dict]:
    return [
        {"type": t.value, "label": meta["label"], "default_percent": meta["default_percent"]}
        for t, meta in DISCOUNT_TYPES.items()
    ]


class FinanceService:
    def __init__(
        self,
        finance: FinanceRepository,
        attendance: AttendanceRepository,
        services: ServiceRepository,
        users: UserRepository,
        access: ChildAccessPolicy,
        *,
        calculator: Optional[FeeCalculator] = None,
    ):
        self._finance = finance
        self._attendance = attendance
        self._services = services
        self._users = users
        self._access = access
        self._calculator = calculator or StandardFeeCalculator()

    # payments

    @staticmethod
    def _require_admin(current: CurrentUser) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage finances")

    def list_payments(
        self,
        current: CurrentUser,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payment]:
        self._require_admin(current)
        return self._finance.list_payments(start=start, end=end, user_id=user_id)

    def get_payment(self, current: CurrentUser, payment_id: int) -> Payment:
        self._require_admin(current)
        payment = self._finance.get_payment(int(payment_id))
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def _payment_fields(self, data: dict) -> dict:
        errors = FieldErrors()
        user_id = errors.check(require_int, data.get("user_id"), "user_id", min_value=1)
        amount = errors.check(require_number, data.get("amount"), "amount", min_value=0)
        payment_date = errors.check(require_date, data.get("payment_date"), "payment_date")
        errors.raise_if_any()
        if not self._users.get_by_id(user_id):
            raise ReferenceIntegrityError(
                "Payer not found", details=[{"field": "user_id", "message": f"user {user_id} does not exist"}]
            )
        return {"user_id": user_id, "amount": amount, "payment_date": payment_date}

    def create_payment(self, current: CurrentUser, data: dict) -> Payment:
        self._require_admin(current)
        payment_id = self._finance.create_payment(**self._payment_fields(data))
        return self.get_payment(current, payment_id)

    def update_payment(self, current: CurrentUser, payment_id: int, data: dict) -> Payment:
        self.get_payment(current, payment_id)
        self._finance.update_payment(int(payment_id), **self._payment_fields(data))
        return self.get_payment(current, payment_id)

    def delete_payment(self, current: CurrentUser, payment_id: int) -> None:
        self._require_admin(current)
        if not self._finance.delete_payment(int(payment_id)):
            raise NotFoundError("Payment not found")

    def stats(self, current: CurrentUser, *, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        self._require_admin(current)
        return self._finance.payment_stats(start=start, end=end)

    # billing

    def _billing_scope(self, current: CurrentUser):
        if current.role not in (Role.ADMIN, Role.PARENT):
            raise AuthorizationError("Billing is available to administrators and parents only")
        return self._access.scope_for(current)

    def billing(self, current: CurrentUser, *, year: int, month: int) -> BillingReport:
        scope = self._billing_scope(current)
        start, end = month_bounds(year, month)

        children = self._finance.billable_children(scope)
        child_ids = [c.child_id for c in children]

        attendance: dict[int, dict[date, bool]] = {cid: {} for cid in child_ids}
        for rec in self._attendance.list_range(start=start, end=end, scope=scope):
            if rec.child_id in attendance:
                attendance[rec.child_id][rec.date] = rec.is_present

        discounts: dict[int, list[Discount]] = {}
        for d in self._finance.list_discounts(year=year, month=month, child_ids=child_ids):
            discounts.setdefault(d.child_id, []).append(d)

        usage: dict[int, list] = {}
        for u in self._services.usage_for_children(child_ids, start=start, end=end):
            usage.setdefault(u.child_id, []).append(u)

        bills: list[dict] = []
        for child in children:
            breakdown = self._calculator.calculate(
                FeeInput(
                    attendance=attendance.get(child.child_id, {}),
                    is_paid_group=child.is_paid_group,
                    discounts=discounts.get(child.child_id, []),
                    services=usage.get(child.child_id, []),
                )
            )
            if breakdown.is_credit:
                logger.warning(
                    "negative bill for child %s in %04d-%02d: %.2f", child.child_id, year, month, breakdown.total
                )
            bills.append(
                {
                    "child_id": child.child_id,
                    "child_name": child.name,
                    "parent_id": child.parent_id,
                    "group_id": child.group_id,
                    "group_name": child.group_name,
                    "is_paid_group": child.is_paid_group,
                    "attended_days": breakdown.attended_days,
                    "base_amount": breakdown.base_amount,
                    "paid_group_fee": breakdown.paid_group_fee,
                    "services_amount": breakdown.services_amount,
                    "services": [
                        {
                            "service_id": u.service_id,
                            "service_name": u.service_name,
                            "attended_lessons": u.attended_lessons,
                            "cost": u.cost,
                        }
                        for u in usage.get(child.child_id, [])
                    ],
                    "discount_amount": breakdown.discount_amount,
                    "discounts": list(breakdown.discounts),
                    "total": breakdown.total,
                    "is_credit": breakdown.is_credit,
                }
            )

        return BillingReport(year=year, month=month, bills=bills, total=round(sum(b["total"] for b in bills), 2))

    # discounts

    def list_discounts(self, current: CurrentUser, *, year: int, month: int) -> Sequence[Discount]:
        scope = self._billing_scope(current)
        if scope.unrestricted:
            return self._finance.list_discounts(year=year, month=month)
        child_ids = [c.child_id for c in self._finance.billable_children(scope)]
        return self._finance.list_discounts(year=year, month=month, child_ids=child_ids)

    def save_discount(self, current: CurrentUser, data: dict) -> Discount:
        self._require_admin(current)

        errors = FieldErrors()
        child_id = errors.check(require_int, data.get("child_id"), "child_id", min_value=1)
        year = errors.check(require_int, data.get("year"), "year", min_value=2000, max_value=2100)
        month = errors.check(require_int, data.get("month"), "month", min_value=1, max_value=12)
        discount_type = errors.check(require_choice, data.get("discount_type", data.get("type")), "discount_type", DiscountType)
        percent = errors.check(optional_number, data.get("percent"), "percent", min_value=0, max_value=100)
        errors.raise_if_any()

        if percent is None:
            percent = float(DISCOUNT_TYPES[discount_type]["default_percent"])
        self._access.child_for(current, child_id)

        discount_id = self._finance.upsert_discount(
            child_id=child_id,
            year=year,
            month=month,
            discount_type=discount_type,
            percent=percent,
            reason=optional_str(data.get("reason")),
        )
        logger.info("discount %s (%s %.0f%%) saved for child %s", discount_id, discount_type.value, percent, child_id)
        for d in self._finance.list_discounts(year=year, month=month, child_ids=[child_id]):
            if d.discount_id == discount_id:
                return d
        raise NotFoundError("Discount not found after save")

    def delete_discount(self, current: CurrentUser, discount_id: int) -> None:
        self._require_admin(current)
        if not self._finance.delete_discount(int(discount_id)):
            raise NotFoundError("Discount not found")
