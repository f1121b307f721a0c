from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..children.access import ChildScope
from ..core.enums import DiscountType
from .model import BillableChild, Discount, Payment


class FinanceRepository(Protocol):
    def list_payments(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payment]:
        raise NotImplementedError

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def create_payment(self, *, user_id: int, amount: float, payment_date: date) -> int:
        raise NotImplementedError

    def update_payment(self, payment_id: int, *, user_id: int, amount: float, payment_date: date) -> bool:
        raise NotImplementedError

    def delete_payment(self, payment_id: int) -> bool:
        raise NotImplementedError

    def payment_stats(self, *, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        raise NotImplementedError

    def list_discounts(self, *, year: int, month: int, child_ids: Optional[Sequence[int]] = None) -> Sequence[Discount]:
        raise NotImplementedError

    def upsert_discount(
        self,
        *,
        child_id: int,
        year: int,
        month: int,
        discount_type: DiscountType,
        percent: float,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def delete_discount(self, discount_id: int) -> bool:
        raise NotImplementedError

    def billable_children(self, scope: ChildScope) -> Sequence[BillableChild]:
        raise NotImplementedError
