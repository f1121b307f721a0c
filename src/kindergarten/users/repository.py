from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this protocol, never on a concrete database adapter.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        role: Role,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, *, changes: dict) -> bool:
        """Update the given columns (email, first_name, last_name, phone, role)."""

        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def set_photo_path(self, user_id: int, *, photo_path: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_parents_with_children(self) -> Sequence[dict]:
        raise NotImplementedError

    def list_teachers_with_groups(self) -> Sequence[dict]:
        raise NotImplementedError
