from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ApplicationStatus


@dataclass(frozen=True)
class Service:
    service_id: int
    service_name: str
    description: Optional[str]
    price: float
    duration: Optional[str] = None
    total_price: Optional[float] = None
    days_of_week: Optional[str] = None
    time: Optional[str] = None
    teachers: Optional[str] = None


@dataclass(frozen=True)
class ServiceApplication:
    application_id: int
    child_id: int
    service_id: int
    parent_id: int
    status: ApplicationStatus
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    teacher_ids: tuple[int, ...] = field(default_factory=tuple)
    child_name: Optional[str] = None
    service_name: Optional[str] = None


@dataclass(frozen=True)
class ServiceAttendance:
    service_id: int
    child_id: int
    date: date
    is_present: bool
    child_name: Optional[str] = None


@dataclass(frozen=True)
class ServiceUsage:
    """Lessons a child attended for one subscribed service in a period."""

    child_id: int
    service_id: int
    service_name: str
    price_per_lesson: float
    attended_lessons: int

    @property
    def cost(self) -> float:
        return self.price_per_lesson * self.attended_lessons
