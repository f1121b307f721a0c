from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .children.access import ChildAccessPolicy
from .children.mysql_child_repository import MySQLChildRepository
from .children.service import ChildService
from .common.photo_storage import PhotoStorage
from .contacts.service import ContactService
from .core.constants import DAILY_RATE, DEFAULT_TOKEN_HOURS, PAID_GROUP_MONTHLY_FEE
from .database.connection import DBConfig, DatabaseConnection
from .finance.calculator.standard_calculator import StandardFeeCalculator
from .finance.mysql_finance_repository import MySQLFinanceRepository
from .finance.service import FinanceService
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.service import GroupService
from .menu.mysql_menu_repository import MySQLMenuRepository
from .menu.service import MenuService
from .notifications.mailer import SmtpMailer, SmtpSettings
from .paid_services.mysql_service_repository import MySQLServiceRepository
from .paid_services.service import PaidServiceService
from .progress.mysql_progress_repository import MySQLProgressRepository
from .progress.service import ProgressService
from .recommendations.mysql_recommendation_repository import MySQLRecommendationRepository
from .recommendations.service import RecommendationService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    token_service: TokenService

    auth_service: AuthService
    user_service: UserService
    group_service: GroupService
    child_service: ChildService
    paid_service_service: PaidServiceService
    attendance_service: AttendanceService
    schedule_service: ScheduleService
    progress_service: ProgressService
    finance_service: FinanceService
    recommendation_service: RecommendationService
    menu_service: MenuService
    contact_service: ContactService

    conn: Optional[DatabaseConnection] = None


def build_container(settings: Any) -> Container:
    """Wire MySQL repositories and services from a settings module."""

    conn = DatabaseConnection(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))

    users_repo = MySQLUserRepository(conn)
    groups_repo = MySQLGroupRepository(conn)
    children_repo = MySQLChildRepository(conn)
    services_repo = MySQLServiceRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    progress_repo = MySQLProgressRepository(conn)
    finance_repo = MySQLFinanceRepository(conn)
    recommendations_repo = MySQLRecommendationRepository(conn)
    menu_repo = MySQLMenuRepository(conn)

    tokens = TokenService(
        getattr(settings, "JWT_SECRET"),
        algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
        expire_hours=float(getattr(settings, "JWT_EXPIRE_HOURS", DEFAULT_TOKEN_HOURS)),
    )
    photos = PhotoStorage(getattr(settings, "UPLOAD_DIR", "uploads"))
    access = ChildAccessPolicy(children_repo, groups_repo)
    mailer = SmtpMailer(
        SmtpSettings(
            host=getattr(settings, "SMTP_HOST", "smtp.gmail.com"),
            port=int(getattr(settings, "SMTP_PORT", 465)),
            user=getattr(settings, "SMTP_USER", None),
            password=getattr(settings, "SMTP_PASSWORD", None),
        )
    )
    calculator = StandardFeeCalculator(
        daily_rate=getattr(settings, "DAILY_RATE", DAILY_RATE),
        paid_group_fee=getattr(settings, "PAID_GROUP_MONTHLY_FEE", PAID_GROUP_MONTHLY_FEE),
    )

    return Container(
        conn=conn,
        token_service=tokens,
        auth_service=AuthService(users_repo, tokens),
        user_service=UserService(users_repo, photos),
        group_service=GroupService(groups_repo, users_repo),
        child_service=ChildService(children_repo, groups_repo, users_repo, services_repo, access, photos),
        paid_service_service=PaidServiceService(services_repo, users_repo, access),
        attendance_service=AttendanceService(attendance_repo, groups_repo, access),
        schedule_service=ScheduleService(schedules_repo, groups_repo),
        progress_service=ProgressService(progress_repo, groups_repo, access),
        finance_service=FinanceService(
            finance_repo, attendance_repo, services_repo, users_repo, access, calculator=calculator
        ),
        recommendation_service=RecommendationService(
            recommendations_repo, children_repo, groups_repo, access, mailer
        ),
        menu_service=MenuService(menu_repo, groups_repo),
        contact_service=ContactService(
            getattr(settings, "CONTACT_INFO", None), getattr(settings, "STAFF_CONTACTS", None)
        ),
    )
