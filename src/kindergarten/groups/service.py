from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import FieldErrors, optional_str, require_bool, require_int, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import CurrentUser
from ..users.repository import UserRepository
from .model import Group
from .repository import GroupRepository

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, groups: GroupRepository, users: UserRepository):
        self._groups = groups
        self._users = users

    def list_groups(self) -> Sequence[Group]:
        return self._groups.list_groups()

    def get_group(self, group_id: int) -> Group:
        group = self._groups.get_by_id(int(group_id))
        if not group:
            raise NotFoundError("Group not found")
        return group

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
                    "Unknown teacher",
                    details=[{"field": "teacher_ids", "message": f"user {teacher_id} is not a teacher"}],
                )
            if teacher_id not in ids:
                ids.append(teacher_id)
        return ids

    def _validated(self, data: dict) -> tuple[str, Optional[str], bool]:
        errors = FieldErrors()
        name = errors.check(require_non_empty, data.get("group_name"), "group_name")
        is_paid = errors.check(require_bool, data.get("is_paid", False), "is_paid")
        errors.raise_if_any()
        return name, optional_str(data.get("age_range")), bool(is_paid)

    def create_group(self, current: CurrentUser, data: dict) -> Group:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage groups")

        name, age_range, is_paid = self._validated(data)
        if self._groups.get_by_name(name):
            raise ConflictError("A group with this name already exists")
        teacher_ids = self._teacher_ids(data.get("teacher_ids", data.get("teacher_id")))

        group_id = self._groups.create_group(group_name=name, age_range=age_range, is_paid=is_paid, teacher_ids=teacher_ids)
        logger.info("group %s created: %s", group_id, name)
        return self.get_group(group_id)

    def update_group(self, current: CurrentUser, group_id: int, data: dict) -> Group:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage groups")

        self.get_group(group_id)
        name, age_range, is_paid = self._validated(data)
        other = self._groups.get_by_name(name)
        if other and other.group_id != int(group_id):
            raise ConflictError("A group with this name already exists")

        raw_teachers = data.get("teacher_ids", data.get("teacher_id"))
        teacher_ids = self._teacher_ids(raw_teachers) if raw_teachers is not None else None

        if not self._groups.update_group(
            int(group_id), group_name=name, age_range=age_range, is_paid=is_paid, teacher_ids=teacher_ids
        ):
            raise NotFoundError("Group not found")
        return self.get_group(group_id)

    def delete_group(self, current: CurrentUser, group_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can manage groups")

        self.get_group(group_id)
        remaining = self._groups.count_children(int(group_id))
        if remaining:
            raise ConflictError(
                "Cannot delete a group that still has children",
                details=[{"field": "group_id", "message": f"{remaining} children remain in the group"}],
            )
        self._groups.delete_group(int(group_id))
        logger.info("group %s deleted by %s", group_id, current.user_id)

    def list_children(self, group_id: int) -> Sequence[dict]:
        self.get_group(group_id)
        return self._groups.list_children(int(group_id))

    def count_children(self, group_id: int) -> int:
        self.get_group(group_id)
        return self._groups.count_children(int(group_id))

    def teacher_group_ids(self, teacher_id: int) -> list[int]:
        return self._groups.group_ids_for_teacher(int(teacher_id))
