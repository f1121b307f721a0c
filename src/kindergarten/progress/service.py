from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..children.access import ChildAccessPolicy
from ..common.datetime_utils import quarter_of
from ..common.validators import FieldErrors, optional_int, optional_number, optional_str, require_date, require_int
from ..core.constants import SCORE_MAX, SCORE_MIN
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..groups.repository import GroupRepository
from ..users.model import CurrentUser
from .model import SKILL_FIELDS, ProgressReport
from .repository import ProgressRepository

logger = logging.getLogger(__name__)

HEIGHT_RANGE = (30, 200)
WEIGHT_RANGE = (2, 100)

_EDITORS = (Role.ADMIN, Role.PSYCHOLOGIST)


def bucket_by_quarter(reports: Iterable[ProgressReport]) -> dict[int, dict[int, list[ProgressReport]]]:
    """Group reports year -> quarter (1-4), each bucket sorted by report date."""

    out: dict[int, dict[int, list[ProgressReport]]] = {}
    for report in sorted(reports, key=lambda r: (r.report_date, r.report_id)):
        year = report.report_date.year
        out.setdefault(year, {}).setdefault(quarter_of(report.report_date), []).append(report)
    return out


def validate_values(data: dict, *, partial: bool = False) -> dict:
    errors = FieldErrors()
    values: dict = {}
    for field in SKILL_FIELDS:
        if not partial or field in data:
            values[field] = errors.check(optional_int, data.get(field), field, min_value=SCORE_MIN, max_value=SCORE_MAX)
    if not partial or "height_cm" in data:
        values["height_cm"] = errors.check(
            optional_number, data.get("height_cm"), "height_cm", min_value=HEIGHT_RANGE[0], max_value=HEIGHT_RANGE[1]
        )
    if not partial or "weight_kg" in data:
        values["weight_kg"] = errors.check(
            optional_number, data.get("weight_kg"), "weight_kg", min_value=WEIGHT_RANGE[0], max_value=WEIGHT_RANGE[1]
        )
    if not partial or "details" in data:
        values["details"] = optional_str(data.get("details"))
    errors.raise_if_any()
    return values


class ProgressService:
    def __init__(self, progress: ProgressRepository, groups: GroupRepository, access: ChildAccessPolicy):
        self._progress = progress
        self._groups = groups
        self._access = access

    def for_child(self, current: CurrentUser, child_id: int) -> dict:
        child = self._access.child_for(current, child_id)
        reports = self._progress.list_for_child(child.child_id)
        buckets = bucket_by_quarter(reports)
        return {
            "child_id": child.child_id,
            "child_name": child.name,
            "reports": [r.to_dict() for r in sorted(reports, key=lambda r: r.report_date)],
            "quarters": {
                str(year): {str(q): [r.to_dict() for r in items] for q, items in quarters.items()}
                for year, quarters in buckets.items()
            },
        }

    def for_group(self, current: CurrentUser, group_id: int) -> Sequence[ProgressReport]:
        if not self._groups.get_by_id(int(group_id)):
            raise NotFoundError("Group not found")
        self._access.ensure_group_access(current, group_id)
        return self._progress.latest_for_group(int(group_id))

    def save(self, current: CurrentUser, data: dict) -> ProgressReport:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and psychologists can write progress reports")

        errors = FieldErrors()
        child_id = errors.check(require_int, data.get("child_id"), "child_id", min_value=1)
        report_date = errors.check(require_date, data.get("report_date", data.get("date")), "report_date")
        errors.raise_if_any()
        values = validate_values(data)

        child = self._access.child_for(current, child_id)
        report_id = self._progress.upsert(child_id=child.child_id, report_date=report_date, values=values)
        logger.info("progress report %s saved for child %s on %s", report_id, child.child_id, report_date)
        return self._progress.get_by_id(report_id)

    def update(self, current: CurrentUser, report_id: int, data: dict) -> ProgressReport:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and psychologists can write progress reports")
        if not self._progress.get_by_id(int(report_id)):
            raise NotFoundError("Progress report not found")

        values = validate_values(data, partial=True)
        if values:
            self._progress.update(int(report_id), values=values)
        return self._progress.get_by_id(int(report_id))

    def delete(self, current: CurrentUser, report_id: int) -> None:
        if current.role not in _EDITORS:
            raise AuthorizationError("Only administrators and psychologists can delete progress reports")
        if not self._progress.delete(int(report_id)):
            raise NotFoundError("Progress report not found")
