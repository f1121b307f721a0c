from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Sequence

from ...paid_services.model import ServiceUsage
from ..model import Discount


@dataclass(frozen=True)
class FeeInput:
    """Everything needed to bill one child for one month."""

    attendance: Mapping[date, bool]
    is_paid_group: bool = False
    discounts: Sequence[Discount] = field(default_factory=tuple)
    services: Sequence[ServiceUsage] = field(default_factory=tuple)


@dataclass(frozen=True)
class FeeBreakdown:
    attended_days: int
    base_amount: float
    paid_group_fee: float
    services_amount: float
    discount_amount: float
    discounts: tuple[dict, ...]
    total: float

    @property
    def is_credit(self) -> bool:
        return self.total < 0


class FeeCalculator(ABC):
    """Calculator interface (Strategy Pattern for monthly fees)."""

    @abstractmethod
    def calculate(self, data: FeeInput) -> FeeBreakdown:
        raise NotImplementedError
