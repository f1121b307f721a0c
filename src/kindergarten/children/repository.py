from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Child, ChildInput


class ChildRepository(Protocol):
    def list_children(
        self,
        *,
        parent_id: Optional[int] = None,
        group_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Child]:
        """List children, optionally restricted to one parent or a set of groups."""

        raise NotImplementedError

    def get_by_id(self, child_id: int) -> Optional[Child]:
        raise NotImplementedError

    def create_child(self, data: ChildInput) -> int:
        raise NotImplementedError

    def update_child(self, child_id: int, data: ChildInput) -> bool:
        raise NotImplementedError

    def set_photo_path(self, child_id: int, *, photo_path: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_child(self, child_id: int) -> bool:
        """Delete the child and every dependent row in one transaction."""

        raise NotImplementedError
