from datetime import date

import pytest

from kindergarten.children.model import Child
from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from kindergarten.groups.model import Group
from kindergarten.groups.service import GroupService
from kindergarten.users.model import CurrentUser
from tests.fakes import InMemoryChildren, InMemoryGroups, InMemoryUsers, make_user

ADMIN = CurrentUser(1, Role.ADMIN)


def _build():
    users = InMemoryUsers([make_user(1, Role.ADMIN), make_user(3, Role.TEACHER), make_user(7, Role.PARENT)])
    children = InMemoryChildren([Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1)])
    groups = InMemoryGroups([Group(1, "Sun"), Group(2, "Stars")], children)
    return GroupService(groups, users), groups


def test_create_group_with_teacher():
    svc, _ = _build()
    group = svc.create_group(ADMIN, {"group_name": "Moon", "age_range": "3-4", "teacher_ids": [3]})

    assert group.teacher_ids == [3]
    assert svc.teacher_group_ids(3) == [group.group_id]


def test_create_group_rejects_non_teacher():
    svc, _ = _build()
    with pytest.raises(ValidationError):
        svc.create_group(ADMIN, {"group_name": "Moon", "teacher_ids": [7]})


def test_duplicate_name_conflicts():
    svc, _ = _build()
    with pytest.raises(ConflictError):
        svc.create_group(ADMIN, {"group_name": "Sun"})


def test_delete_group_with_children_is_refused():
    svc, groups = _build()
    with pytest.raises(ConflictError) as exc:
        svc.delete_group(ADMIN, 1)
    assert exc.value.status_code == 409
    assert 1 in groups.groups


def test_delete_empty_group():
    svc, groups = _build()
    svc.delete_group(ADMIN, 2)
    assert 2 not in groups.groups
    with pytest.raises(NotFoundError):
        svc.get_group(2)


def test_update_keeps_teachers_when_not_given():
    svc, _ = _build()
    created = svc.create_group(ADMIN, {"group_name": "Moon", "teacher_ids": [3]})
    updated = svc.update_group(ADMIN, created.group_id, {"group_name": "Full moon", "is_paid": True})

    assert updated.group_name == "Full moon"
    assert updated.is_paid is True
    assert updated.teacher_ids == [3]


def test_only_admin_manages_groups():
    svc, _ = _build()
    with pytest.raises(AuthorizationError):
        svc.create_group(CurrentUser(3, Role.TEACHER), {"group_name": "Moon"})


def test_children_count():
    svc, _ = _build()
    assert svc.count_children(1) == 1
    assert svc.count_children(2) == 0
