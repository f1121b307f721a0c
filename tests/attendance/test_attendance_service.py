from datetime import date

import pytest

from kindergarten.attendance.service import AttendanceService
from kindergarten.children.access import ChildAccessPolicy
from kindergarten.children.model import Child
from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthorizationError, ValidationError
from kindergarten.groups.model import Group
from kindergarten.users.model import CurrentUser
from tests.fakes import InMemoryAttendance, InMemoryChildren, InMemoryGroups

ADMIN = CurrentUser(1, Role.ADMIN)
TEACHER = CurrentUser(3, Role.TEACHER)
PARENT = CurrentUser(7, Role.PARENT)


def _build():
    children = InMemoryChildren(
        [
            Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1),
            Child(11, "Petya", date(2020, 1, 1), parent_id=8, group_id=2),
        ]
    )
    groups = InMemoryGroups(
        [Group(1, "Sun", teachers=({"id": 3, "name": "T"},)), Group(2, "Stars")], children
    )
    attendance = InMemoryAttendance(children)
    return AttendanceService(attendance, groups, ChildAccessPolicy(children, groups)), attendance


def test_marking_twice_updates_in_place():
    svc, repo = _build()

    first = svc.mark(ADMIN, {"child_id": 10, "date": "2025-03-03", "is_present": True})
    second = svc.mark(ADMIN, {"child_id": 10, "date": "2025-03-03", "is_present": False})

    assert first.attendance_id == second.attendance_id
    assert len(repo.rows) == 1
    assert repo.rows[(10, date(2025, 3, 3))].is_present is False


def test_teacher_limited_to_own_groups():
    svc, _ = _build()
    svc.mark(TEACHER, {"child_id": 10, "date": "2025-03-03", "is_present": True})
    with pytest.raises(AuthorizationError):
        svc.mark(TEACHER, {"child_id": 11, "date": "2025-03-03", "is_present": True})
    with pytest.raises(AuthorizationError):
        svc.for_group(TEACHER, 2, start=date(2025, 3, 1), end=date(2025, 3, 31))


def test_parents_cannot_mark():
    svc, _ = _build()
    with pytest.raises(AuthorizationError):
        svc.mark(PARENT, {"child_id": 10, "date": "2025-03-03", "is_present": True})


def test_mark_reports_every_invalid_field():
    svc, _ = _build()
    with pytest.raises(ValidationError) as exc:
        svc.mark(ADMIN, {"child_id": "x", "date": "03.03.2025"})
    assert {d["field"] for d in exc.value.details} == {"child_id", "date", "is_present"}


def test_mark_many_and_scoped_reads():
    svc, _ = _build()
    svc.mark_many(
        ADMIN,
        [
            {"child_id": 10, "date": "2025-03-03", "is_present": True},
            {"child_id": 11, "date": "2025-03-03", "is_present": True},
            {"child_id": 10, "date": "2025-04-01", "is_present": True},
        ],
    )

    assert [r.child_id for r in svc.by_date(PARENT, date(2025, 3, 3))] == [10]
    assert len(svc.for_month(ADMIN, year=2025, month=3)) == 2
    assert len(svc.for_group(ADMIN, 1, start=date(2025, 3, 1), end=date(2025, 4, 30))) == 2


def test_reversed_period_is_rejected():
    svc, _ = _build()
    with pytest.raises(ValidationError):
        svc.for_child(ADMIN, 10, start=date(2025, 3, 31), end=date(2025, 3, 1))


def test_batch_is_written_once_after_every_record_checks_out():
    svc, repo = _build()

    records = svc.mark_many(
        ADMIN,
        [
            {"child_id": 10, "date": "2025-03-03", "is_present": True},
            {"child_id": 11, "date": "2025-03-03", "is_present": False},
        ],
    )

    assert repo.batches == 1
    assert [(r.child_id, r.is_present, r.group_id) for r in records] == [(10, True, 1), (11, False, 2)]


def test_rejected_batch_writes_nothing():
    svc, repo = _build()

    with pytest.raises(ValidationError):
        svc.mark_many(
            ADMIN,
            [
                {"child_id": 10, "date": "2025-03-03", "is_present": True},
                {"child_id": 11, "date": "not-a-date", "is_present": True},
            ],
        )
    with pytest.raises(AuthorizationError):
        svc.mark_many(
            TEACHER,
            [
                {"child_id": 10, "date": "2025-03-03", "is_present": True},
                {"child_id": 11, "date": "2025-03-03", "is_present": True},
            ],
        )

    assert repo.rows == {}
    assert repo.batches == 0
