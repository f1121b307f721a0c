from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..children.access import ChildAccessPolicy
from ..children.model import Child
from ..common.datetime_utils import month_bounds
from ..common.validators import FieldErrors, require_bool, require_date, require_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..groups.repository import GroupRepository
from ..users.model import CurrentUser
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _check_period(start: date, end: date) -> None:
    if end < start:
        raise ValidationError(
            "Invalid period", details=[{"field": "end_date", "message": "end_date must not be before start_date"}]
        )


class AttendanceService:
    """Daily attendance marking and role-scoped reads."""

    def __init__(self, attendance: AttendanceRepository, groups: GroupRepository, access: ChildAccessPolicy):
        self._attendance = attendance
        self._groups = groups
        self._access = access

    def _checked(self, current: CurrentUser, data: dict) -> tuple[Child, date, bool]:
        errors = FieldErrors()
        child_id = errors.check(require_int, data.get("child_id"), "child_id", min_value=1)
        day = errors.check(require_date, data.get("date"), "date")
        is_present = errors.check(require_bool, data.get("is_present"), "is_present")
        errors.raise_if_any()
        return self._access.child_for(current, child_id), day, is_present

    def mark(self, current: CurrentUser, data: dict) -> AttendanceRecord:
        return self.mark_many(current, [data])[0]

    def mark_many(self, current: CurrentUser, records: Sequence[dict]) -> list[AttendanceRecord]:
        """Validate and authorize every record, then write them all in one transaction."""

        if current.role not in (Role.ADMIN, Role.TEACHER):
            raise AuthorizationError("Only administrators and teachers can mark attendance")
        if not isinstance(records, (list, tuple)) or not records:
            raise ValidationError("records must be a non-empty list")

        checked = [self._checked(current, r if isinstance(r, dict) else {}) for r in records]
        ids = self._attendance.upsert_many([(child.child_id, day, present) for child, day, present in checked])
        logger.debug("marked %d attendance record(s)", len(ids))
        return [
            AttendanceRecord(
                attendance_id=attendance_id,
                child_id=child.child_id,
                date=day,
                is_present=present,
                child_name=child.name,
                group_id=child.group_id,
            )
            for attendance_id, (child, day, present) in zip(ids, checked)
        ]

    def for_group(self, current: CurrentUser, group_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        _check_period(start, end)
        if not self._groups.get_by_id(int(group_id)):
            raise NotFoundError("Group not found")
        self._access.ensure_group_access(current, group_id)
        return self._attendance.list_for_group(int(group_id), start=start, end=end)

    def for_child(
        self,
        current: CurrentUser,
        child_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        if start and end:
            _check_period(start, end)
        child = self._access.child_for(current, child_id)
        return self._attendance.list_for_child(child.child_id, start=start, end=end)

    def by_date(self, current: CurrentUser, day: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_range(start=day, end=day, scope=self._access.scope_for(current))

    def for_month(self, current: CurrentUser, *, year: int, month: int) -> Sequence[AttendanceRecord]:
        start, end = month_bounds(year, month)
        return self._attendance.list_range(start=start, end=end, scope=self._access.scope_for(current))

    def delete(self, current: CurrentUser, attendance_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can delete attendance records")
        if not self._attendance.delete(int(attendance_id)):
            raise NotFoundError("Attendance record not found")
