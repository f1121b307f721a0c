"""In-memory repositories shared by the service and HTTP tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from kindergarten.attendance.model import AttendanceRecord
from kindergarten.children.model import Child, ChildInput
from kindergarten.core.enums import ApplicationStatus, Role
from kindergarten.finance.model import BillableChild, Discount, Payment
from kindergarten.groups.model import Group
from kindergarten.menu.model import Dish, Placement
from kindergarten.paid_services.model import Service, ServiceApplication, ServiceAttendance, ServiceUsage
from kindergarten.progress.model import ProgressReport
from kindergarten.recommendations.model import Recommendation, SendDetails
from kindergarten.schedules.model import ScheduleItem
from kindergarten.users.model import User


def make_user(user_id: int, role: Role, *, email: Optional[str] = None, password: str = "secret1") -> User:
    return User(
        user_id=user_id,
        email=email or f"user{user_id}@example.com",
        password_hash=generate_password_hash(password),
        role=role,
        first_name=role.value.title(),
        last_name=str(user_id),
    )


class InMemoryUsers:
    def __init__(self, users: Sequence[User] = ()):
        self.users: dict[int, User] = {u.user_id: u for u in users}
        self._id = max(self.users, default=0)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def list_users(self, *, role=None):
        return [u for u in self.users.values() if role is None or u.role == role]

    def create_user(self, *, email, password_hash, role, first_name, last_name, phone=None) -> int:
        self._id += 1
        self.users[self._id] = User(self._id, email, password_hash, role, first_name, last_name, phone)
        return self._id

    def update_user(self, user_id: int, *, changes: dict) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(self.users[user_id], **changes)
        return True

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        return self.update_user(user_id, changes={"password_hash": password_hash})

    def set_photo_path(self, user_id: int, *, photo_path) -> bool:
        return self.update_user(user_id, changes={"photo_path": photo_path})

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(int(user_id), None) is not None

    def list_parents_with_children(self):
        return [u.to_public() for u in self.users.values() if u.role == Role.PARENT]

    def list_teachers_with_groups(self):
        return [u.to_public() for u in self.users.values() if u.role == Role.TEACHER]


class InMemoryGroups:
    def __init__(self, groups: Sequence[Group] = (), children: Optional["InMemoryChildren"] = None):
        self.groups: dict[int, Group] = {g.group_id: g for g in groups}
        self.children = children
        self._id = max(self.groups, default=0)

    def list_groups(self):
        return list(self.groups.values())

    def get_by_id(self, group_id: int) -> Optional[Group]:
        return self.groups.get(int(group_id))

    def get_by_name(self, group_name: str) -> Optional[Group]:
        return next((g for g in self.groups.values() if g.group_name == group_name), None)

    def create_group(self, *, group_name, age_range, is_paid, teacher_ids) -> int:
        self._id += 1
        teachers = tuple({"id": t, "name": f"Teacher {t}"} for t in teacher_ids)
        self.groups[self._id] = Group(self._id, group_name, age_range, is_paid, teachers)
        return self._id

    def update_group(self, group_id, *, group_name, age_range, is_paid, teacher_ids=None) -> bool:
        group = self.groups.get(int(group_id))
        if not group:
            return False
        teachers = group.teachers
        if teacher_ids is not None:
            teachers = tuple({"id": t, "name": f"Teacher {t}"} for t in teacher_ids)
        self.groups[group_id] = replace(
            group, group_name=group_name, age_range=age_range, is_paid=is_paid, teachers=teachers
        )
        return True

    def delete_group(self, group_id: int) -> bool:
        return self.groups.pop(int(group_id), None) is not None

    def count_children(self, group_id: int) -> int:
        return len(self.list_children(group_id))

    def list_children(self, group_id: int):
        if self.children is None:
            return []
        return [c.to_dict() for c in self.children.children.values() if c.group_id == int(group_id)]

    def group_ids_for_teacher(self, teacher_id: int) -> list[int]:
        return [g.group_id for g in self.groups.values() if int(teacher_id) in g.teacher_ids]


class InMemoryChildren:
    def __init__(self, children: Sequence[Child] = ()):
        self.children: dict[int, Child] = {c.child_id: c for c in children}
        self._id = max(self.children, default=0)
        self.deleted: list[int] = []

    def list_children(self, *, parent_id=None, group_ids=None):
        out = list(self.children.values())
        if parent_id is not None:
            out = [c for c in out if c.parent_id == parent_id]
        if group_ids is not None:
            out = [c for c in out if c.group_id in group_ids]
        return out

    def get_by_id(self, child_id: int) -> Optional[Child]:
        return self.children.get(int(child_id))

    def create_child(self, data: ChildInput) -> int:
        self._id += 1
        self.children[self._id] = Child(
            child_id=self._id,
            name=data.name,
            date_of_birth=data.date_of_birth,
            parent_id=data.parent_id,
            group_id=data.group_id,
            allergies=data.allergies,
            service_ids=data.service_ids,
        )
        return self._id

    def update_child(self, child_id: int, data: ChildInput) -> bool:
        child = self.children.get(int(child_id))
        if not child:
            return False
        self.children[child_id] = replace(
            child,
            name=data.name,
            date_of_birth=data.date_of_birth,
            parent_id=data.parent_id,
            group_id=data.group_id,
            allergies=data.allergies,
            service_ids=data.service_ids,
        )
        return True

    def set_photo_path(self, child_id: int, *, photo_path) -> bool:
        self.children[child_id] = replace(self.children[child_id], photo_path=photo_path)
        return True

    def delete_child(self, child_id: int) -> bool:
        if self.children.pop(int(child_id), None) is None:
            return False
        self.deleted.append(int(child_id))
        return True


class InMemoryAttendance:
    """Keyed by (child, day) the way the unique index is."""

    def __init__(self, children: Optional[InMemoryChildren] = None):
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self.children = children
        self.batches = 0
        self._id = 0

    def upsert(self, *, child_id: int, day: date, is_present: bool) -> int:
        existing = self.rows.get((child_id, day))
        if existing:
            self.rows[(child_id, day)] = replace(existing, is_present=is_present)
            return existing.attendance_id
        self._id += 1
        self.rows[(child_id, day)] = AttendanceRecord(self._id, child_id, day, is_present)
        return self._id

    def upsert_many(self, records):
        self.batches += 1
        return [self.upsert(child_id=c, day=d, is_present=p) for c, d, p in records]

    def get_by_id(self, attendance_id: int):
        return next((r for r in self.rows.values() if r.attendance_id == attendance_id), None)

    def delete(self, attendance_id: int) -> bool:
        for key, rec in list(self.rows.items()):
            if rec.attendance_id == attendance_id:
                del self.rows[key]
                return True
        return False

    def _group_of(self, child_id: int):
        child = self.children.get_by_id(child_id) if self.children else None
        return child.group_id if child else None

    def list_for_group(self, group_id: int, *, start: date, end: date):
        return [
            r for r in self.rows.values() if self._group_of(r.child_id) == group_id and start <= r.date <= end
        ]

    def list_for_child(self, child_id: int, *, start=None, end=None):
        return [
            r
            for r in self.rows.values()
            if r.child_id == child_id and (start is None or r.date >= start) and (end is None or r.date <= end)
        ]

    def list_range(self, *, start: date, end: date, scope):
        out = []
        for r in self.rows.values():
            if not start <= r.date <= end:
                continue
            child = self.children.get_by_id(r.child_id) if self.children else None
            if scope.parent_id is not None and (not child or child.parent_id != scope.parent_id):
                continue
            if scope.group_ids is not None and (not child or child.group_id not in scope.group_ids):
                continue
            out.append(r)
        return out


class InMemoryServices:
    def __init__(self, services: Sequence[Service] = (), children: Optional[InMemoryChildren] = None):
        self.services: dict[int, Service] = {s.service_id: s for s in services}
        self.children = children
        self.applications: dict[int, ServiceApplication] = {}
        self.lessons: dict[tuple[int, int, date], bool] = {}
        self._id = max(self.services, default=0)
        self._app_id = 0

    def list_services(self):
        return list(self.services.values())

    def get_by_id(self, service_id: int):
        return self.services.get(int(service_id))

    def create_service(self, data: dict) -> int:
        self._id += 1
        fields = {"description": None, **data}
        self.services[self._id] = Service(service_id=self._id, **fields)
        return self._id

    def update_service(self, service_id: int, data: dict) -> bool:
        self.services[service_id] = replace(self.services[service_id], **data)
        return True

    def delete_service(self, service_id: int) -> bool:
        return self.services.pop(int(service_id), None) is not None

    def list_applications(self, *, parent_id=None):
        return [a for a in self.applications.values() if parent_id is None or a.parent_id == parent_id]

    def get_application(self, application_id: int):
        return self.applications.get(int(application_id))

    def create_application(self, *, child_id, service_id, parent_id, comment) -> int:
        self._app_id += 1
        self.applications[self._app_id] = ServiceApplication(
            self._app_id, child_id, service_id, parent_id, ApplicationStatus.PENDING, comment
        )
        return self._app_id

    def decide_application(self, application_id, *, status, decided_by, decided_at, teacher_ids=()) -> bool:
        app = self.applications.get(application_id)
        if not app or app.status != ApplicationStatus.PENDING:
            return False
        self.applications[application_id] = replace(
            app, status=status, decided_by=decided_by, decided_at=decided_at, teacher_ids=tuple(teacher_ids)
        )
        if status == ApplicationStatus.APPROVED and self.children is not None:
            child = self.children.children[app.child_id]
            if app.service_id not in child.service_ids:
                self.children.children[app.child_id] = replace(
                    child, service_ids=child.service_ids + (app.service_id,)
                )
        return True

    def delete_application(self, application_id: int) -> bool:
        return self.applications.pop(int(application_id), None) is not None

    def list_attendance(self, service_id: int):
        return [
            ServiceAttendance(s, c, d, p) for (s, c, d), p in sorted(self.lessons.items()) if s == int(service_id)
        ]

    def upsert_attendance(self, *, service_id, child_id, day, is_present) -> None:
        self.lessons[(service_id, child_id, day)] = is_present

    def usage_for_children(self, child_ids, *, start, end):
        out = []
        for child_id in child_ids:
            child = self.children.get_by_id(child_id) if self.children else None
            for service_id in child.service_ids if child else ():
                service = self.services[service_id]
                attended = sum(
                    1
                    for (s, c, d), present in self.lessons.items()
                    if s == service_id and c == child_id and present and start <= d <= end
                )
                out.append(ServiceUsage(child_id, service_id, service.service_name, service.price, attended))
        return out


class InMemoryFinance:
    def __init__(self, billable: Sequence[BillableChild] = ()):
        self.billable = list(billable)
        self.payments: dict[int, Payment] = {}
        self.discounts: dict[int, Discount] = {}
        self._id = 0

    def list_payments(self, *, start=None, end=None, user_id=None):
        return [p for p in self.payments.values() if user_id is None or p.user_id == user_id]

    def get_payment(self, payment_id: int):
        return self.payments.get(int(payment_id))

    def create_payment(self, *, user_id, amount, payment_date) -> int:
        self._id += 1
        self.payments[self._id] = Payment(self._id, user_id, amount, payment_date)
        return self._id

    def update_payment(self, payment_id, *, user_id, amount, payment_date) -> bool:
        self.payments[payment_id] = Payment(payment_id, user_id, amount, payment_date)
        return True

    def delete_payment(self, payment_id: int) -> bool:
        return self.payments.pop(int(payment_id), None) is not None

    def payment_stats(self, *, start=None, end=None) -> dict:
        amounts = [p.amount for p in self.payments.values()]
        return {"count": len(amounts), "total": sum(amounts)}

    def list_discounts(self, *, year, month, child_ids=None):
        return [
            d
            for d in self.discounts.values()
            if d.year == year and d.month == month and (child_ids is None or d.child_id in child_ids)
        ]

    def upsert_discount(self, *, child_id, year, month, discount_type, percent, reason) -> int:
        for d in self.discounts.values():
            if (d.child_id, d.year, d.month, d.discount_type) == (child_id, year, month, discount_type):
                self.discounts[d.discount_id] = replace(d, percent=percent, reason=reason)
                return d.discount_id
        self._id += 1
        self.discounts[self._id] = Discount(self._id, child_id, year, month, discount_type, percent, reason)
        return self._id

    def delete_discount(self, discount_id: int) -> bool:
        return self.discounts.pop(int(discount_id), None) is not None

    def billable_children(self, scope):
        out = self.billable
        if scope.parent_id is not None:
            out = [c for c in out if c.parent_id == scope.parent_id]
        if scope.group_ids is not None:
            out = [c for c in out if c.group_id in scope.group_ids]
        return list(out)


class InMemoryRecommendations:
    def __init__(self, items: Sequence[Recommendation] = (), users: Optional[InMemoryUsers] = None):
        self.items: dict[int, Recommendation] = {r.recommendation_id: r for r in items}
        self.users = users
        self._id = max(self.items, default=0)

    def list_all(self):
        return list(self.items.values())

    def list_for_child(self, child_id: int):
        return [r for r in self.items.values() if r.child_id == child_id]

    def get_by_id(self, recommendation_id: int):
        return self.items.get(int(recommendation_id))

    def create(self, *, child_id, user_id, text, day) -> int:
        self._id += 1
        self.items[self._id] = Recommendation(self._id, child_id, user_id, text, day)
        return self._id

    def update(self, recommendation_id, *, text, day) -> bool:
        self.items[recommendation_id] = replace(self.items[recommendation_id], recommendation_text=text, date=day)
        return True

    def delete(self, recommendation_id: int) -> bool:
        return self.items.pop(int(recommendation_id), None) is not None

    def delete_for_child(self, child_id: int) -> int:
        doomed = [k for k, r in self.items.items() if r.child_id == child_id]
        for k in doomed:
            del self.items[k]
        return len(doomed)

    def get_send_details(self, recommendation_id: int):
        rec = self.items.get(int(recommendation_id))
        if not rec:
            return None
        parent = self.users.get_by_id(rec.parent_id) if self.users and rec.parent_id else None
        return SendDetails(rec, parent.email if parent else None, parent.full_name if parent else None)

    def mark_sent(self, recommendation_id: int, *, sent_at: datetime) -> bool:
        self.items[recommendation_id] = replace(self.items[recommendation_id], is_sent=True, sent_at=sent_at)
        return True


class InMemoryMenu:
    def __init__(self, dishes: Sequence[Dish] = (), placements: Sequence[Placement] = ()):
        self.dishes: dict[int, Dish] = {d.menu_id: d for d in dishes}
        self.placements: dict[int, Placement] = {p.menu_id: p for p in placements}
        self._dish_id = max(self.dishes, default=0)
        self._placement_id = max(self.placements, default=0)

    def list_dishes(self, *, group_id=None):
        return [d for d in self.dishes.values() if group_id is None or d.group_id in (None, group_id)]

    def get_dish(self, menu_id: int):
        return self.dishes.get(int(menu_id))

    def create_dish(self, *, dish_name, category, weight, meal_type, group_id) -> int:
        self._dish_id += 1
        self.dishes[self._dish_id] = Dish(self._dish_id, dish_name, category, weight, meal_type, group_id)
        return self._dish_id

    def update_dish(self, menu_id, *, dish_name, category, weight, meal_type, group_id) -> bool:
        self.dishes[menu_id] = Dish(menu_id, dish_name, category, weight, meal_type, group_id)
        return True

    def delete_dish(self, menu_id: int) -> bool:
        return self.dishes.pop(int(menu_id), None) is not None

    def list_placements(self, group_id: int, week_number: int):
        return [p for p in self.placements.values() if p.group_id == group_id and p.week_number == week_number]

    def get_placement(self, menu_id: int):
        return self.placements.get(int(menu_id))

    def create_placement(self, *, group_id, week_number, meal_day, meal_type, dish_id) -> int:
        self._placement_id += 1
        self.placements[self._placement_id] = Placement(
            self._placement_id, group_id, week_number, meal_day, meal_type, dish_id
        )
        return self._placement_id

    def update_placement(self, menu_id, *, group_id, week_number, meal_day, meal_type, dish_id) -> bool:
        self.placements[menu_id] = Placement(menu_id, group_id, week_number, meal_day, meal_type, dish_id)
        return True

    def delete_placement(self, menu_id: int) -> bool:
        return self.placements.pop(int(menu_id), None) is not None

    def delete_week(self, group_id: int, week_number: int) -> int:
        doomed = [p.menu_id for p in self.list_placements(group_id, week_number)]
        for k in doomed:
            del self.placements[k]
        return len(doomed)


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []

    def send(self, *, to: str, subject: str, text: str) -> None:
        self.sent.append({"to": to, "subject": subject, "text": text})


class InMemorySchedules:
    def __init__(self):
        self.items: dict[int, ScheduleItem] = {}
        self._id = 0

    def list_all(self):
        return list(self.items.values())

    def list_for_group(self, group_id: int):
        return [i for i in self.items.values() if i.group_id == group_id]

    def get_by_id(self, schedule_id: int):
        return self.items.get(int(schedule_id))

    def create(self, *, group_id, start_time, end_time, action) -> int:
        self._id += 1
        self.items[self._id] = ScheduleItem(self._id, group_id, start_time, end_time, action)
        return self._id

    def update(self, schedule_id, *, group_id, start_time, end_time, action) -> bool:
        self.items[schedule_id] = ScheduleItem(schedule_id, group_id, start_time, end_time, action)
        return True

    def delete(self, schedule_id: int) -> bool:
        return self.items.pop(int(schedule_id), None) is not None


class InMemoryProgress:
    def __init__(self):
        self.reports: dict[int, ProgressReport] = {}
        self._id = 0

    def list_for_child(self, child_id: int):
        return [r for r in self.reports.values() if r.child_id == child_id]

    def latest_for_group(self, group_id: int):
        return []

    def get_by_id(self, report_id: int):
        return self.reports.get(int(report_id))

    def upsert(self, *, child_id, report_date, values) -> int:
        for r in self.reports.values():
            if r.child_id == child_id and r.report_date == report_date:
                self.reports[r.report_id] = replace(r, **values)
                return r.report_id
        self._id += 1
        self.reports[self._id] = ProgressReport(self._id, child_id, report_date, **values)
        return self._id

    def update(self, report_id, *, values) -> bool:
        self.reports[report_id] = replace(self.reports[report_id], **values)
        return True

    def delete(self, report_id: int) -> bool:
        return self.reports.pop(int(report_id), None) is not None
