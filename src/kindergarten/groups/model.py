from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Group:
    group_id: int
    group_name: str
    age_range: Optional[str] = None
    is_paid: bool = False
    teachers: tuple[dict, ...] = field(default_factory=tuple)
    children_count: int = 0

    @property
    def teacher_ids(self) -> list[int]:
        return [int(t["id"]) for t in self.teachers]

    def to_dict(self) -> dict:
        return {
            "group_id": self.group_id,
            "group_name": self.group_name,
            "age_range": self.age_range,
            "is_paid": self.is_paid,
            "teachers": list(self.teachers),
            "children_count": self.children_count,
        }
