from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from .model import ScheduleItem


class ScheduleRepository(Protocol):
    def list_all(self) -> Sequence[ScheduleItem]:
        raise NotImplementedError

    def list_for_group(self, group_id: int) -> Sequence[ScheduleItem]:
        """Items of one group ordered by start time."""

        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleItem]:
        raise NotImplementedError

    def create(self, *, group_id: int, start_time: time, end_time: time, action: str) -> int:
        raise NotImplementedError

    def update(self, schedule_id: int, *, group_id: int, start_time: time, end_time: time, action: str) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError
