from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..groups.repository import GroupRepository
from ..users.model import CurrentUser
from .model import Child
from .repository import ChildRepository


@dataclass(frozen=True)
class ChildScope:
    """Which children a user may see: everything, one parent's, or some groups'."""

    parent_id: Optional[int] = None
    group_ids: Optional[tuple[int, ...]] = None

    @property
    def unrestricted(self) -> bool:
        return self.parent_id is None and self.group_ids is None


class ChildAccessPolicy:
    """Role/ownership rules shared by every feature that touches a child."""

    def __init__(self, children: ChildRepository, groups: GroupRepository):
        self._children = children
        self._groups = groups

    def scope_for(self, current: CurrentUser) -> ChildScope:
        if current.role == Role.PARENT:
            return ChildScope(parent_id=current.user_id)
        if current.role == Role.TEACHER:
            return ChildScope(group_ids=tuple(self._groups.group_ids_for_teacher(current.user_id)))
        return ChildScope()

    def visible_children(self, current: CurrentUser) -> Sequence[Child]:
        scope = self.scope_for(current)
        return self._children.list_children(parent_id=scope.parent_id, group_ids=scope.group_ids)

    def can_view(self, current: CurrentUser, child: Child) -> bool:
        scope = self.scope_for(current)
        if scope.parent_id is not None:
            return child.parent_id == scope.parent_id
        if scope.group_ids is not None:
            return child.group_id in scope.group_ids
        return True

    def child_for(self, current: CurrentUser, child_id: int) -> Child:
        """Load a child, raising 404/403 when it is missing or not visible."""

        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        if not self.can_view(current, child):
            raise AuthorizationError("You do not have access to this child")
        return child

    def ensure_group_access(self, current: CurrentUser, group_id: int) -> None:
        """Teachers may only act on their own groups; parents never on whole groups."""

        if current.role == Role.PARENT:
            raise AuthorizationError("You do not have access to this group")
        if current.role == Role.TEACHER and int(group_id) not in self._groups.group_ids_for_teacher(current.user_id):
            raise AuthorizationError("You are not assigned to this group")
