from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group


class GroupRepository(Protocol):
    def list_groups(self) -> Sequence[Group]:
        raise NotImplementedError

    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def get_by_name(self, group_name: str) -> Optional[Group]:
        raise NotImplementedError

    def create_group(self, *, group_name: str, age_range: Optional[str], is_paid: bool, teacher_ids: Sequence[int]) -> int:
        """Insert the group and its caretakers in one transaction."""

        raise NotImplementedError

    def update_group(
        self,
        group_id: int,
        *,
        group_name: str,
        age_range: Optional[str],
        is_paid: bool,
        teacher_ids: Optional[Sequence[int]] = None,
    ) -> bool:
        """Update group columns; replace the caretaker set when teacher_ids is given."""

        raise NotImplementedError

    def delete_group(self, group_id: int) -> bool:
        raise NotImplementedError

    def count_children(self, group_id: int) -> int:
        raise NotImplementedError

    def list_children(self, group_id: int) -> Sequence[dict]:
        raise NotImplementedError

    def group_ids_for_teacher(self, teacher_id: int) -> list[int]:
        raise NotImplementedError
