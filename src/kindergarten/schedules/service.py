from __future__ import annotations

from typing import Sequence

from ..common.validators import FieldErrors, require_int, require_non_empty, require_time
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ReferenceIntegrityError, ValidationError
from ..groups.repository import GroupRepository
from ..users.model import CurrentUser
from .model import ScheduleItem
from .repository import ScheduleRepository

_EDITORS = (Role.ADMIN, Role.TEACHER)


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, groups: GroupRepository):
        self._schedules = schedules
        self._groups = groups

    def list_all(self) -> Sequence[ScheduleItem]:
        return self._schedules.list_all()

    def for_group(self, group_id: int) -> Sequence[ScheduleItem]:
        if not self._groups.get_by_id(int(group_id)):
            raise NotFoundError("Group not found")
        items = list(self._schedules.list_for_group(int(group_id)))
        items.sort(key=lambda i: (i.start_time, i.end_time))
        return items

    def _validated(self, data: dict) -> dict:
        errors = FieldErrors()
        group_id = errors.check(require_int, data.get("group_id"), "group_id", min_value=1)
        start = errors.check(require_time, data.get("start_time"), "start_time")
        end = errors.check(require_time, data.get("end_time"), "end_time")
        action = errors.check(require_non_empty, data.get("action"), "action")
        errors.raise_if_any()

        if end <= start:
            raise ValidationError(
                "Invalid time range", details=[{"field": "end_time", "message": "end_time must be after start_time"}]
            )
        if not self._groups.get_by_id(group_id):
            raise ReferenceIntegrityError(
                "Group not found", details=[{"field": "group_id", "message": f"group {group_id} does not exist"}]
            )
        return {"group_id": group_id, "start_time": start, "end_time": end, "action": action}

    def create(self, current: CurrentUser, data: dict) -> ScheduleItem:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and teachers can edit schedules")
        schedule_id = self._schedules.create(**self._validated(data))
        return self._schedules.get_by_id(schedule_id)

    def update(self, current: CurrentUser, schedule_id: int, data: dict) -> ScheduleItem:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and teachers can edit schedules")
        if not self._schedules.get_by_id(int(schedule_id)):
            raise NotFoundError("Schedule item not found")
        self._schedules.update(int(schedule_id), **self._validated(data))
        return self._schedules.get_by_id(int(schedule_id))

    def delete(self, current: CurrentUser, schedule_id: int) -> None:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and teachers can edit schedules")
        if not self._schedules.delete(int(schedule_id)):
            raise NotFoundError("Schedule item not found")
