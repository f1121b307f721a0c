from datetime import date, datetime

import pytest

from kindergarten.children.access import ChildAccessPolicy
from kindergarten.children.model import Child
from kindergarten.core.enums import ApplicationStatus, Role
from kindergarten.core.exceptions import AuthorizationError, ConflictError, ValidationError
from kindergarten.groups.model import Group
from kindergarten.paid_services.model import Service
from kindergarten.paid_services.service import PaidServiceService
from kindergarten.users.model import CurrentUser
from tests.fakes import InMemoryChildren, InMemoryGroups, InMemoryServices, InMemoryUsers, make_user

ADMIN = CurrentUser(1, Role.ADMIN)
TEACHER = CurrentUser(3, Role.TEACHER)
PARENT = CurrentUser(7, Role.PARENT)
NOW = datetime(2025, 4, 1, 12, 0)


@pytest.fixture()
def env():
    users = InMemoryUsers([make_user(1, Role.ADMIN), make_user(3, Role.TEACHER), make_user(7, Role.PARENT)])
    children = InMemoryChildren(
        [
            Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1),
            Child(11, "Petya", date(2020, 1, 1), parent_id=8, group_id=1),
        ]
    )
    groups = InMemoryGroups([Group(1, "Sun", teachers=({"id": 3, "name": "T"},))], children)
    repo = InMemoryServices([Service(1, "English", "Lessons", 150), Service(2, "Dance", None, 100)], children)
    svc = PaidServiceService(repo, users, ChildAccessPolicy(children, groups), clock=lambda: NOW)
    return svc, repo, children


def test_parent_applies_for_own_child(env):
    svc, _, _ = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 1, "comment": "Tuesdays please"})

    assert application.status == ApplicationStatus.PENDING
    assert application.comment == "Tuesdays please"

    with pytest.raises(ConflictError):
        svc.apply(PARENT, {"child_id": 10, "service_id": 1})
    with pytest.raises(AuthorizationError):
        svc.apply(PARENT, {"child_id": 11, "service_id": 1})


def test_approval_subscribes_child_and_stores_teachers(env):
    svc, _, children = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 2})

    approved = svc.approve(TEACHER, application.application_id, {"teacher_ids": [3]})

    assert approved.status == ApplicationStatus.APPROVED
    assert approved.teacher_ids == (3,)
    assert approved.decided_at == NOW
    assert 2 in children.get_by_id(10).service_ids


def test_reject_leaves_subscriptions_alone(env):
    svc, _, children = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 2})

    rejected = svc.reject(ADMIN, application.application_id)

    assert rejected.status == ApplicationStatus.REJECTED
    assert children.get_by_id(10).service_ids == ()


def test_decided_application_cannot_be_decided_again(env):
    svc, _, _ = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 2})
    svc.reject(ADMIN, application.application_id)

    with pytest.raises(ConflictError):
        svc.approve(ADMIN, application.application_id)


def test_parent_cannot_decide(env):
    svc, _, _ = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 2})
    with pytest.raises(AuthorizationError):
        svc.approve(PARENT, application.application_id)


def test_parent_withdraws_only_pending(env):
    svc, repo, _ = env
    application = svc.apply(PARENT, {"child_id": 10, "service_id": 2})
    svc.delete_application(PARENT, application.application_id)
    assert repo.applications == {}

    second = svc.apply(PARENT, {"child_id": 10, "service_id": 2})
    svc.approve(ADMIN, second.application_id)
    with pytest.raises(ConflictError):
        svc.delete_application(PARENT, second.application_id)


def test_lesson_attendance_requires_subscription(env):
    svc, _, _ = env
    with pytest.raises(ValidationError):
        svc.mark_attendance(TEACHER, 1, {"child_id": 10, "date": "2025-04-02"})

    application = svc.apply(PARENT, {"child_id": 10, "service_id": 1})
    svc.approve(ADMIN, application.application_id)
    mark = svc.mark_attendance(TEACHER, 1, {"child_id": 10, "date": "2025-04-02"})

    assert mark.is_present is True
    assert [a.child_id for a in svc.list_attendance(1)] == [10]


def test_catalog_is_admin_managed(env):
    svc, _, _ = env
    created = svc.create_service(ADMIN, {"service_name": "Chess", "price": 120, "teachers": "Ivanova"})
    assert created.teachers == "Ivanova"

    with pytest.raises(AuthorizationError):
        svc.update_service(TEACHER, created.service_id, {"price": 10})
    with pytest.raises(ValidationError):
        svc.create_service(ADMIN, {"service_name": "Chess", "price": -1})
