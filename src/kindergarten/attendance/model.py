from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """One day of kindergarten attendance for a child."""

    attendance_id: int
    child_id: int
    date: date
    is_present: bool
    child_name: Optional[str] = None
    group_id: Optional[int] = None
