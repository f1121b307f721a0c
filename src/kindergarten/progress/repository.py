from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ProgressReport


class ProgressRepository(Protocol):
    def list_for_child(self, child_id: int) -> Sequence[ProgressReport]:
        raise NotImplementedError

    def latest_for_group(self, group_id: int) -> Sequence[ProgressReport]:
        """Most recent report of every child in the group that has one."""

        raise NotImplementedError

    def get_by_id(self, report_id: int) -> Optional[ProgressReport]:
        raise NotImplementedError

    def upsert(self, *, child_id: int, report_date: date, values: dict) -> int:
        """Insert or replace the report for (child_id, report_date). Returns report_id."""

        raise NotImplementedError

    def update(self, report_id: int, *, values: dict) -> bool:
        raise NotImplementedError

    def delete(self, report_id: int) -> bool:
        raise NotImplementedError
