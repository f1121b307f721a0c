from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account (staff member or parent).

    Plain data object; it never touches the database itself.
    """

    user_id: int
    email: str
    password_hash: str
    role: Role
    first_name: str
    last_name: str
    phone: Optional[str] = None
    photo_path: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_public(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "photo_path": self.photo_path,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified bearer token."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
