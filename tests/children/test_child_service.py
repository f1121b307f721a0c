import base64
from datetime import date, timedelta

import pytest

from kindergarten.children.access import ChildAccessPolicy
from kindergarten.children.model import Child
from kindergarten.children.service import ChildService, parse_allergies, summarize_service_costs
from kindergarten.common.photo_storage import PhotoStorage
from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthorizationError, NotFoundError, ReferenceIntegrityError, ValidationError
from kindergarten.groups.model import Group
from kindergarten.paid_services.model import Service, ServiceUsage
from kindergarten.users.model import CurrentUser
from tests.fakes import InMemoryChildren, InMemoryGroups, InMemoryServices, InMemoryUsers, make_user

ADMIN = CurrentUser(1, Role.ADMIN)
TEACHER = CurrentUser(3, Role.TEACHER)
PARENT = CurrentUser(7, Role.PARENT)
PSYCH = CurrentUser(4, Role.PSYCHOLOGIST)

PNG = base64.b64encode(b"\x89PNGdata").decode()


@pytest.fixture()
def env(tmp_path):
    users = InMemoryUsers(
        [make_user(1, Role.ADMIN), make_user(3, Role.TEACHER), make_user(4, Role.PSYCHOLOGIST), make_user(7, Role.PARENT)]
    )
    children = InMemoryChildren(
        [
            Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1, service_ids=(1,)),
            Child(11, "Petya", date(2020, 1, 1), parent_id=8, group_id=2),
        ]
    )
    groups = InMemoryGroups([Group(1, "Sun", teachers=({"id": 3, "name": "T"},)), Group(2, "Stars")], children)
    services = InMemoryServices([Service(1, "English", None, 150)], children)
    svc = ChildService(children, groups, users, services, ChildAccessPolicy(children, groups), PhotoStorage(tmp_path))
    return svc, children, services


def _payload(**overrides):
    data = {"name": "Vanya", "date_of_birth": "2021-06-01", "parent_id": 7, "group_id": 1}
    data.update(overrides)
    return data


def test_listing_is_role_scoped(env):
    svc, _, _ = env
    assert [c.child_id for c in svc.list_children(PARENT)] == [10]
    assert [c.child_id for c in svc.list_children(TEACHER)] == [10]
    assert [c.child_id for c in svc.list_children(PSYCH)] == [10, 11]


def test_foreign_child_is_forbidden(env):
    svc, _, _ = env
    with pytest.raises(AuthorizationError):
        svc.get_child(PARENT, 11)
    with pytest.raises(NotFoundError):
        svc.get_child(ADMIN, 404)


def test_create_child_with_photo_and_allergies(env, tmp_path):
    svc, _, _ = env
    child = svc.create_child(ADMIN, _payload(allergies="milk, nuts", services=[1], photo=PNG, photo_mime_type="image/png"))

    assert child.allergies == ("milk", "nuts")
    assert child.service_ids == (1,)
    assert (tmp_path / child.photo_path).exists()


def test_future_birth_date_is_rejected(env):
    svc, _, _ = env
    tomorrow = (date.today() + timedelta(days=2)).isoformat()
    with pytest.raises(ValidationError) as exc:
        svc.create_child(ADMIN, _payload(date_of_birth=tomorrow))
    assert exc.value.details[0]["field"] == "date_of_birth"


def test_parent_must_be_a_parent(env):
    svc, _, _ = env
    with pytest.raises(ReferenceIntegrityError):
        svc.create_child(ADMIN, _payload(parent_id=3))


def test_unknown_service_is_a_reference_error(env):
    svc, _, _ = env
    with pytest.raises(ReferenceIntegrityError):
        svc.create_child(ADMIN, _payload(services=[99]))


def test_delete_child_is_admin_only(env):
    svc, children, _ = env
    with pytest.raises(AuthorizationError):
        svc.delete_child(TEACHER, 10)
    svc.delete_child(ADMIN, 10)
    assert children.deleted == [10]


def test_services_cost_counts_attended_lessons(env):
    svc, _, services = env
    services.upsert_attendance(service_id=1, child_id=10, day=date(2025, 3, 3), is_present=True)
    services.upsert_attendance(service_id=1, child_id=10, day=date(2025, 3, 5), is_present=True)
    services.upsert_attendance(service_id=1, child_id=10, day=date(2025, 3, 7), is_present=False)

    report = svc.services_cost(PARENT, 10, start=date(2025, 3, 1), end=date(2025, 3, 31))

    assert report["services"][0]["attended_lessons"] == 2
    assert report["total"] == 300


def test_parse_allergies_variants():
    assert parse_allergies(None) == ()
    assert parse_allergies(["egg", " ", "fish "]) == ("egg", "fish")
    with pytest.raises(ValidationError):
        parse_allergies(42)


def test_summarize_service_costs():
    summary = summarize_service_costs([ServiceUsage(1, 1, "English", 150, 2), ServiceUsage(1, 2, "Dance", 100, 1)])
    assert summary["total"] == 400


def test_photo_update_keeps_old_file_when_saving_the_path_fails(env, tmp_path, monkeypatch):
    svc, children, _ = env
    first = svc.update_child(ADMIN, 10, _payload(name="Masha", photo=PNG, photo_mime_type="image/png"))

    def broken(child_id, *, photo_path):
        raise RuntimeError("db down")

    monkeypatch.setattr(children, "set_photo_path", broken)
    with pytest.raises(RuntimeError):
        svc.update_child(ADMIN, 10, _payload(name="Masha", photo=PNG, photo_mime_type="image/jpeg"))

    assert children.get_by_id(10).photo_path == first.photo_path
    assert (tmp_path / first.photo_path).exists()
    assert list((tmp_path / "photos").glob("*.jpg")) == []
