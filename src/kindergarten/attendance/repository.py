from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..children.access import ChildScope
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(self, *, child_id: int, day: date, is_present: bool) -> int:
        """Create or update the (child, day) record atomically.

        Returns attendance_id.
        """

        raise NotImplementedError

    def upsert_many(self, records: Sequence[tuple[int, date, bool]]) -> list[int]:
        """Upsert (child_id, day, is_present) triples in one transaction; ids in input order."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_for_group(self, group_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_child(self, child_id: int, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, scope: ChildScope) -> Sequence[AttendanceRecord]:
        """Records in [start, end] for the children visible in `scope`."""

        raise NotImplementedError
