from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Child:
    child_id: int
    name: str
    date_of_birth: date
    parent_id: Optional[int]
    group_id: Optional[int]
    allergies: tuple[str, ...] = field(default_factory=tuple)
    photo_path: Optional[str] = None
    service_ids: tuple[int, ...] = field(default_factory=tuple)
    group_name: Optional[str] = None
    parent_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "child_id": self.child_id,
            "name": self.name,
            "date_of_birth": self.date_of_birth,
            "parent_id": self.parent_id,
            "parent_name": self.parent_name,
            "group_id": self.group_id,
            "group_name": self.group_name,
            "allergies": list(self.allergies),
            "photo_path": self.photo_path,
            "services": list(self.service_ids),
        }


@dataclass(frozen=True)
class ChildInput:
    """Validated create/update payload."""

    name: str
    date_of_birth: date
    parent_id: int
    group_id: int
    allergies: tuple[str, ...]
    service_ids: tuple[int, ...]
