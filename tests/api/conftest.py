from datetime import date
from types import SimpleNamespace

import pytest

from kindergarten.attendance.service import AttendanceService
from kindergarten.children.access import ChildAccessPolicy
from kindergarten.children.model import Child
from kindergarten.children.service import ChildService
from kindergarten.common.photo_storage import PhotoStorage
from kindergarten.contacts.service import ContactService
from kindergarten.container import Container
from kindergarten.core.enums import Role
from kindergarten.finance.service import FinanceService
from kindergarten.groups.model import Group
from kindergarten.groups.service import GroupService
from kindergarten.main import create_app
from kindergarten.menu.service import MenuService
from kindergarten.paid_services.service import PaidServiceService
from kindergarten.progress.service import ProgressService
from kindergarten.recommendations.service import RecommendationService
from kindergarten.schedules.service import ScheduleService
from kindergarten.users.service import AuthService, UserService
from kindergarten.users.tokens import TokenService
from tests.fakes import (
    InMemoryAttendance,
    InMemoryChildren,
    InMemoryFinance,
    InMemoryGroups,
    InMemoryMenu,
    InMemoryProgress,
    InMemoryRecommendations,
    InMemorySchedules,
    InMemoryServices,
    InMemoryUsers,
    RecordingMailer,
    make_user,
)


@pytest.fixture()
def repos():
    users = InMemoryUsers(
        [
            make_user(1, Role.ADMIN, email="admin@example.com", password="admin123"),
            make_user(3, Role.TEACHER),
            make_user(4, Role.PSYCHOLOGIST),
            make_user(7, Role.PARENT),
        ]
    )
    children = InMemoryChildren([Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1)])
    groups = InMemoryGroups([Group(1, "Sun", teachers=({"id": 3, "name": "T"},))], children)
    return SimpleNamespace(
        users=users,
        children=children,
        groups=groups,
        attendance=InMemoryAttendance(children),
        services=InMemoryServices(children=children),
        finance=InMemoryFinance(),
        recommendations=InMemoryRecommendations(users=users),
        menu=InMemoryMenu(),
        schedules=InMemorySchedules(),
        progress=InMemoryProgress(),
        mailer=RecordingMailer(),
    )


@pytest.fixture()
def tokens():
    return TokenService("http-test-secret")


@pytest.fixture()
def app(repos, tokens, tmp_path):
    photos = PhotoStorage(tmp_path)
    access = ChildAccessPolicy(repos.children, repos.groups)
    container = Container(
        token_service=tokens,
        auth_service=AuthService(repos.users, tokens),
        user_service=UserService(repos.users, photos),
        group_service=GroupService(repos.groups, repos.users),
        child_service=ChildService(repos.children, repos.groups, repos.users, repos.services, access, photos),
        paid_service_service=PaidServiceService(repos.services, repos.users, access),
        attendance_service=AttendanceService(repos.attendance, repos.groups, access),
        schedule_service=ScheduleService(repos.schedules, repos.groups),
        progress_service=ProgressService(repos.progress, repos.groups, access),
        finance_service=FinanceService(repos.finance, repos.attendance, repos.services, repos.users, access),
        recommendation_service=RecommendationService(
            repos.recommendations, repos.children, repos.groups, access, repos.mailer
        ),
        menu_service=MenuService(repos.menu, repos.groups),
        contact_service=ContactService({"phone": "+1 555 0100"}, [{"name": "Nurse", "role": "nurse"}]),
    )
    settings = SimpleNamespace(DEBUG=False, TESTING=True, LOG_LEVEL="WARNING", UPLOAD_DIR=str(tmp_path))
    return create_app(settings, container=container)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_header(repos, tokens):
    def _header(user_id: int) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(repos.users.get_by_id(user_id))}"}

    return _header
