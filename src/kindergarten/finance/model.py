from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import DiscountType


@dataclass(frozen=True)
class Payment:
    payment_id: int
    user_id: int
    amount: float
    payment_date: date
    payer_name: Optional[str] = None


@dataclass(frozen=True)
class Discount:
    discount_id: int
    child_id: int
    year: int
    month: int
    discount_type: DiscountType
    percent: float
    reason: Optional[str] = None


@dataclass(frozen=True)
class BillableChild:
    """A child together with the group facts the monthly bill depends on."""

    child_id: int
    name: str
    parent_id: Optional[int]
    group_id: Optional[int]
    group_name: Optional[str]
    is_paid_group: bool
