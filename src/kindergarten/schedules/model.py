from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class ScheduleItem:
    """One slot of a group's daily routine."""

    schedule_id: int
    group_id: int
    start_time: time
    end_time: time
    action: str
    group_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "group_id": self.group_id,
            "group_name": self.group_name,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "action": self.action,
        }
