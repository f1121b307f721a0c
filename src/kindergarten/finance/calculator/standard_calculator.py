from __future__ import annotations

from ...common.datetime_utils import is_weekend
from ...core.constants import DAILY_RATE, PAID_GROUP_MONTHLY_FEE
from .base import FeeBreakdown, FeeCalculator, FeeInput


class StandardFeeCalculator(FeeCalculator):
    """Standard rule: weekday attendance x daily rate + paid-group fee + lessons - discounts.

    Discounts apply additively to (base + paid-group fee); they do not
    compound and the total is not clamped at zero.
    """

    def __init__(self, *, daily_rate: float = DAILY_RATE, paid_group_fee: float = PAID_GROUP_MONTHLY_FEE):
        self._daily_rate = daily_rate
        self._paid_group_fee = paid_group_fee

    def calculate(self, data: FeeInput) -> FeeBreakdown:
        attended = sum(1 for day, present in data.attendance.items() if present and not is_weekend(day))

        base = attended * self._daily_rate
        surcharge = self._paid_group_fee if data.is_paid_group else 0
        extra = sum(s.price_per_lesson * s.attended_lessons for s in data.services)

        subtotal = base + surcharge
        applied = []
        for d in data.discounts:
            amount = subtotal * float(d.percent) / 100
            applied.append(
                {
                    "discount_id": d.discount_id,
                    "discount_type": d.discount_type.value,
                    "percent": float(d.percent),
                    "amount": round(amount, 2),
                }
            )
        discount_total = sum(a["amount"] for a in applied)

        return FeeBreakdown(
            attended_days=attended,
            base_amount=round(base, 2),
            paid_group_fee=round(surcharge, 2),
            services_amount=round(extra, 2),
            discount_amount=round(discount_total, 2),
            discounts=tuple(applied),
            total=round(subtotal + extra - discount_total, 2),
        )
