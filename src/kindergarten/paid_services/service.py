from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..children.access import ChildAccessPolicy
from ..common.datetime_utils import now_local
from ..common.validators import (
    FieldErrors,
    optional_number,
    optional_str,
    require_bool,
    require_date,
    require_int,
    require_non_empty,
    require_number,
)
from ..core.enums import ApplicationStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .model import Service, ServiceApplication, ServiceAttendance
from .repository import ServiceRepository

logger = logging.getLogger(__name__)

_DECIDERS = (Role.ADMIN, Role.TEACHER)


class PaidServiceService:
    """Paid extra services: catalog, parent applications and lesson attendance."""

    def __init__(self, services: ServiceRepository, users: UserRepository, access: ChildAccessPolicy, *, clock=now_local):
        self._services = services
        self._users = users
        self._access = access
        self._clock = clock

    # catalog

    def list_services(self) -> Sequence[Service]:
        return self._services.list_services()

    def get_service(self, service_id: int) -> Service:
        service = self._services.get_by_id(int(service_id))
        if not service:
            raise NotFoundError("Service not found")
        return service

    @staticmethod
    def _validated(data: dict, *, partial: bool) -> dict:
        errors = FieldErrors()
        out: dict = {}
        if not partial or "service_name" in data:
            out["service_name"] = errors.check(require_non_empty, data.get("service_name"), "service_name")
        if not partial or "price" in data:
            out["price"] = errors.check(require_number, data.get("price"), "price", min_value=0)
        if "total_price" in data:
            out["total_price"] = errors.check(optional_number, data.get("total_price"), "total_price", min_value=0)
        for field in ("description", "duration", "days_of_week", "time", "teachers"):
            if field in data:
                out[field] = optional_str(data.get(field))
        errors.raise_if_any()
        return out

    def create_service(self, current: CurrentUser, data: dict) -> Service:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage services")
        service_id = self._services.create_service(self._validated(data, partial=False))
        logger.info("service %s created", service_id)
        return self.get_service(service_id)

    def update_service(self, current: CurrentUser, service_id: int, data: dict) -> Service:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage services")
        self.get_service(service_id)
        changes = self._validated(data, partial=True)
        if changes:
            self._services.update_service(int(service_id), changes)
        return self.get_service(service_id)

    def delete_service(self, current: CurrentUser, service_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage services")
        if not self._services.delete_service(int(service_id)):
            raise NotFoundError("Service not found")

    # applications

    def list_applications(self, current: CurrentUser) -> Sequence[ServiceApplication]:
        if current.role == Role.PARENT:
            return self._services.list_applications(parent_id=current.user_id)
        return self._services.list_applications()

    def _application(self, application_id: int) -> ServiceApplication:
        application = self._services.get_application(int(application_id))
        if not application:
            raise NotFoundError("Application not found")
        return application

    def apply(self, current: CurrentUser, data: dict) -> ServiceApplication:
        if current.role != Role.PARENT:
            raise AuthorizationError("Only parents can apply for services")

        errors = FieldErrors()
        child_id = errors.check(require_int, data.get("child_id"), "child_id", min_value=1)
        service_id = errors.check(require_int, data.get("service_id"), "service_id", min_value=1)
        errors.raise_if_any()

        child = self._access.child_for(current, child_id)
        service = self.get_service(service_id)
        if service.service_id in child.service_ids:
            raise ConflictError("The child is already subscribed to this service")
        for existing in self._services.list_applications(parent_id=current.user_id):
            if (
                existing.child_id == child.child_id
                and existing.service_id == service.service_id
                and existing.status == ApplicationStatus.PENDING
            ):
                raise ConflictError("An application for this service is already pending")

        application_id = self._services.create_application(
            child_id=child.child_id,
            service_id=service.service_id,
            parent_id=current.user_id,
            comment=optional_str(data.get("comment")),
        )
        logger.info("application %s: child %s -> service %s", application_id, child.child_id, service.service_id)
        return self._application(application_id)

    def _teacher_ids(self, raw) -> list[int]:
        if raw is None:
            return []
        if not isinstance(raw, (list, tuple)):
            raw = [raw]
        ids: list[int] = []
        for value in raw:
            teacher_id = require_int(value, "teacher_ids", min_value=1)
            user = self._users.get_by_id(teacher_id)
            if not user or user.role != Role.TEACHER:
                raise ValidationError(
                    "Unknown teacher", details=[{"field": "teacher_ids", "message": f"user {teacher_id} is not a teacher"}]
                )
            if teacher_id not in ids:
                ids.append(teacher_id)
        return ids

    def _decide(self, current: CurrentUser, application_id: int, status: ApplicationStatus, teacher_ids=()) -> ServiceApplication:
        if current.role not in _DECIDERS:
            raise AuthorizationError("Only administrators and teachers can decide applications")

        application = self._application(application_id)
        if application.status != ApplicationStatus.PENDING:
            raise ConflictError(f"Application is already {application.status.value}")

        ok = self._services.decide_application(
            application.application_id,
            status=status,
            decided_by=current.user_id,
            decided_at=self._clock(),
            teacher_ids=teacher_ids,
        )
        if not ok:
            raise ConflictError("Application was decided concurrently")
        logger.info("application %s %s by %s", application.application_id, status.value, current.user_id)
        return self._application(application_id)

    def approve(self, current: CurrentUser, application_id: int, data: Optional[dict] = None) -> ServiceApplication:
        data = data or {}
        teacher_ids = self._teacher_ids(data.get("teacher_ids", data.get("teachers")))
        return self._decide(current, application_id, ApplicationStatus.APPROVED, teacher_ids)

    def reject(self, current: CurrentUser, application_id: int) -> ServiceApplication:
        return self._decide(current, application_id, ApplicationStatus.REJECTED)

    def delete_application(self, current: CurrentUser, application_id: int) -> None:
        application = self._application(application_id)
        if current.role == Role.PARENT:
            if application.parent_id != current.user_id:
                raise AuthorizationError("You can only withdraw your own applications")
            if application.status != ApplicationStatus.PENDING:
                raise ConflictError("Only pending applications can be withdrawn")
        elif not current.is_admin:
            raise AuthorizationError("Only administrators can delete applications")

        self._services.delete_application(application.application_id)

    # lesson attendance

    def list_attendance(self, service_id: int) -> Sequence[ServiceAttendance]:
        self.get_service(service_id)
        return self._services.list_attendance(int(service_id))

    def mark_attendance(self, current: CurrentUser, service_id: int, data: dict) -> ServiceAttendance:
        if current.role not in (Role.ADMIN, Role.TEACHER):
            raise AuthorizationError("Only administrators and teachers can mark lesson attendance")

        service = self.get_service(service_id)
        errors = FieldErrors()
        child_id = errors.check(require_int, data.get("child_id"), "child_id", min_value=1)
        day = errors.check(require_date, data.get("date"), "date")
        is_present = errors.check(require_bool, data.get("is_present", True), "is_present")
        errors.raise_if_any()

        child = self._access.child_for(current, child_id)
        if service.service_id not in child.service_ids:
            raise ValidationError(
                "Child is not subscribed to this service",
                details=[{"field": "child_id", "message": "child is not subscribed to this service"}],
            )

        self._services.upsert_attendance(service_id=service.service_id, child_id=child.child_id, day=day, is_present=is_present)
        return ServiceAttendance(service_id=service.service_id, child_id=child.child_id, date=day, is_present=is_present)
