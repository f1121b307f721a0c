from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApplicationStatus
from .model import Service, ServiceApplication, ServiceAttendance, ServiceUsage


class ServiceRepository(Protocol):
    def list_services(self) -> Sequence[Service]:
        raise NotImplementedError

    def get_by_id(self, service_id: int) -> Optional[Service]:
        raise NotImplementedError

    def create_service(self, data: dict) -> int:
        raise NotImplementedError

    def update_service(self, service_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete_service(self, service_id: int) -> bool:
        raise NotImplementedError

    def list_applications(self, *, parent_id: Optional[int] = None) -> Sequence[ServiceApplication]:
        raise NotImplementedError

    def get_application(self, application_id: int) -> Optional[ServiceApplication]:
        raise NotImplementedError

    def create_application(self, *, child_id: int, service_id: int, parent_id: int, comment: Optional[str]) -> int:
        raise NotImplementedError

    def decide_application(
        self,
        application_id: int,
        *,
        status: ApplicationStatus,
        decided_by: int,
        decided_at: datetime,
        teacher_ids: Sequence[int] = (),
    ) -> bool:
        """Set the decision; on approval also subscribe the child and store the teacher set.

        Only pending applications are changed; returns False otherwise.
        """

        raise NotImplementedError

    def delete_application(self, application_id: int) -> bool:
        raise NotImplementedError

    def list_attendance(self, service_id: int) -> Sequence[ServiceAttendance]:
        raise NotImplementedError

    def upsert_attendance(self, *, service_id: int, child_id: int, day: date, is_present: bool) -> None:
        raise NotImplementedError

    def usage_for_children(self, child_ids: Sequence[int], *, start: date, end: date) -> Sequence[ServiceUsage]:
        """Attended lesson counts per (child, subscribed service) in [start, end]."""

        raise NotImplementedError
