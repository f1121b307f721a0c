from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..common.datetime_utils import now_local
from ..common.photo_storage import PhotoStorage
from ..common.validators import FieldErrors, require_date, require_int, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ReferenceIntegrityError, ValidationError
from ..groups.repository import GroupRepository
from ..paid_services.model import ServiceUsage
from ..paid_services.repository import ServiceRepository
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .access import ChildAccessPolicy
from .model import Child, ChildInput
from .repository import ChildRepository

logger = logging.getLogger(__name__)


def parse_allergies(value) -> tuple[str, ...]:
    """Accept a JSON list or a comma separated string."""

    if value is None or value == "":
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValidationError(
            "Invalid allergies", details=[{"field": "allergies", "message": "allergies must be a list of strings"}]
        )
    return tuple(s for s in (str(x).strip() for x in items) if s)


def summarize_service_costs(usages: Sequence[ServiceUsage]) -> dict:
    services = [
        {
            "service_id": u.service_id,
            "service_name": u.service_name,
            "price_per_lesson": u.price_per_lesson,
            "attended_lessons": u.attended_lessons,
            "cost": u.cost,
        }
        for u in usages
    ]
    return {"services": services, "total": sum(s["cost"] for s in services)}


class ChildService:
    def __init__(
        self,
        children: ChildRepository,
        groups: GroupRepository,
        users: UserRepository,
        services: ServiceRepository,
        access: ChildAccessPolicy,
        photos: PhotoStorage,
    ):
        self._children = children
        self._groups = groups
        self._users = users
        self._services = services
        self._access = access
        self._photos = photos

    def list_children(self, current: CurrentUser) -> Sequence[Child]:
        return self._access.visible_children(current)

    def get_child(self, current: CurrentUser, child_id: int) -> Child:
        return self._access.child_for(current, child_id)

    def _validated(self, data: dict) -> ChildInput:
        errors = FieldErrors()
        name = errors.check(require_non_empty, data.get("name"), "name")
        dob = errors.check(require_date, data.get("date_of_birth"), "date_of_birth")
        parent_id = errors.check(require_int, data.get("parent_id"), "parent_id", min_value=1)
        group_id = errors.check(require_int, data.get("group_id"), "group_id", min_value=1)
        allergies = errors.check(parse_allergies, data.get("allergies"))
        service_ids = errors.check(self._service_ids, data.get("services"))
        errors.raise_if_any()

        if dob > now_local().date():
            raise ValidationError(
                "Invalid date of birth",
                details=[{"field": "date_of_birth", "message": "date_of_birth cannot be in the future"}],
            )

        parent = self._users.get_by_id(parent_id)
        if not parent or parent.role != Role.PARENT:
            raise ReferenceIntegrityError(
                "Parent not found", details=[{"field": "parent_id", "message": f"user {parent_id} is not a parent"}]
            )
        if not self._groups.get_by_id(group_id):
            raise ReferenceIntegrityError(
                "Group not found", details=[{"field": "group_id", "message": f"group {group_id} does not exist"}]
            )
        for service_id in service_ids:
            if not self._services.get_by_id(service_id):
                raise ReferenceIntegrityError(
                    "Service not found", details=[{"field": "services", "message": f"service {service_id} does not exist"}]
                )

        return ChildInput(
            name=name,
            date_of_birth=dob,
            parent_id=parent_id,
            group_id=group_id,
            allergies=allergies,
            service_ids=service_ids,
        )

    @staticmethod
    def _service_ids(value) -> tuple[int, ...]:
        if value is None:
            return ()
        if not isinstance(value, (list, tuple)):
            raise ValidationError("Invalid services", details=[{"field": "services", "message": "services must be a list"}])
        ids: list[int] = []
        for item in value:
            service_id = require_int(item, "services", min_value=1)
            if service_id not in ids:
                ids.append(service_id)
        return tuple(ids)

    def _store_photo(self, child: Child, data: dict) -> None:
        if not data.get("photo"):
            return
        self._photos.replace(
            old_path=child.photo_path,
            prefix="child",
            entity_id=child.child_id,
            data=data["photo"],
            mime_type=data.get("photo_mime_type"),
            commit=lambda path: self._children.set_photo_path(child.child_id, photo_path=path),
        )

    def create_child(self, current: CurrentUser, data: dict) -> Child:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can add children")

        payload = self._validated(data)
        if data.get("photo"):
            # Reject a bad photo before anything is written.
            self._photos.decode(data["photo"], data.get("photo_mime_type"))

        child_id = self._children.create_child(payload)
        child = self._children.get_by_id(child_id)
        self._store_photo(child, data)
        logger.info("child %s created in group %s", child_id, payload.group_id)
        return self._children.get_by_id(child_id)

    def update_child(self, current: CurrentUser, child_id: int, data: dict) -> Child:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can edit children")

        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")

        payload = self._validated(data)
        if data.get("photo"):
            self._photos.decode(data["photo"], data.get("photo_mime_type"))
        if not self._children.update_child(child.child_id, payload):
            raise NotFoundError("Child not found")
        self._store_photo(child, data)
        return self._children.get_by_id(child.child_id)

    def delete_child(self, current: CurrentUser, child_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can delete children")

        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")

        if not self._children.delete_child(child.child_id):
            raise NotFoundError("Child not found")
        self._photos.delete(child.photo_path)
        logger.info("child %s deleted with dependent records by %s", child.child_id, current.user_id)

    def services_cost(self, current: CurrentUser, child_id: int, *, start: date, end: date) -> dict:
        child = self._access.child_for(current, child_id)
        if end < start:
            raise ValidationError(
                "Invalid period", details=[{"field": "end_date", "message": "end_date must not be before start_date"}]
            )
        usages = self._services.usage_for_children([child.child_id], start=start, end=end)
        summary = summarize_service_costs(usages)
        return {
            "child_id": child.child_id,
            "start_date": start,
            "end_date": end,
            **summary,
        }
