import logging
from datetime import date

import pytest

from kindergarten.children.access import ChildAccessPolicy
from kindergarten.children.model import Child
from kindergarten.core.enums import DiscountType, Role
from kindergarten.core.exceptions import AuthorizationError, ValidationError
from kindergarten.finance.model import BillableChild
from kindergarten.finance.service import FinanceService, discount_types
from kindergarten.groups.model import Group
from kindergarten.users.model import CurrentUser
from tests.fakes import (
    InMemoryAttendance,
    InMemoryChildren,
    InMemoryFinance,
    InMemoryGroups,
    InMemoryServices,
    InMemoryUsers,
    make_user,
)

ADMIN = CurrentUser(1, Role.ADMIN)
PARENT = CurrentUser(7, Role.PARENT)
TEACHER = CurrentUser(3, Role.TEACHER)


def _build():
    users = InMemoryUsers([make_user(1, Role.ADMIN), make_user(3, Role.TEACHER), make_user(7, Role.PARENT)])
    children = InMemoryChildren(
        [
            Child(10, "Masha", date(2020, 1, 1), parent_id=7, group_id=1),
            Child(11, "Petya", date(2020, 2, 2), parent_id=8, group_id=2),
        ]
    )
    groups = InMemoryGroups([Group(1, "Sun"), Group(2, "Stars", is_paid=True)], children)
    finance = InMemoryFinance(
        [
            BillableChild(10, "Masha", 7, 1, "Sun", False),
            BillableChild(11, "Petya", 8, 2, "Stars", True),
        ]
    )
    attendance = InMemoryAttendance(children)
    services = InMemoryServices(children=children)
    svc = FinanceService(finance, attendance, services, users, ChildAccessPolicy(children, groups))
    return svc, finance, attendance


def test_billing_for_admin_covers_every_child():
    svc, _, attendance = _build()
    for day in (3, 4, 5):
        attendance.upsert(child_id=10, day=date(2025, 3, day), is_present=True)
    attendance.upsert(child_id=11, day=date(2025, 3, 3), is_present=True)

    report = svc.billing(ADMIN, year=2025, month=3)

    by_child = {b["child_id"]: b for b in report.bills}
    assert by_child[10]["total"] == 3 * 194
    assert by_child[11]["total"] == 194 + 1300
    assert report.total == 3 * 194 + 194 + 1300


def test_parent_sees_only_own_children_bills():
    svc, _, _ = _build()
    report = svc.billing(PARENT, year=2025, month=3)
    assert [b["child_id"] for b in report.bills] == [10]


def test_teacher_has_no_billing_access():
    svc, _, _ = _build()
    with pytest.raises(AuthorizationError):
        svc.billing(TEACHER, year=2025, month=3)


def test_negative_bill_is_flagged_and_logged(caplog):
    svc, finance, _ = _build()
    finance.upsert_discount(
        child_id=11, year=2025, month=3, discount_type=DiscountType.DISABLED_CHILD, percent=100, reason=None
    )
    finance.upsert_discount(
        child_id=11, year=2025, month=3, discount_type=DiscountType.MANY_CHILDREN, percent=50, reason=None
    )

    with caplog.at_level(logging.WARNING, logger="kindergarten.finance.service"):
        report = svc.billing(ADMIN, year=2025, month=3)

    bill = next(b for b in report.bills if b["child_id"] == 11)
    assert bill["total"] == -650
    assert bill["is_credit"] is True
    assert "negative bill" in caplog.text


def test_save_discount_uses_default_percent():
    svc, _, _ = _build()
    discount = svc.save_discount(ADMIN, {"child_id": 10, "year": 2025, "month": 3, "discount_type": "SINGLE_PARENT"})
    assert discount.percent == 30

    again = svc.save_discount(
        ADMIN, {"child_id": 10, "year": 2025, "month": 3, "discount_type": "SINGLE_PARENT", "percent": 40}
    )
    assert again.discount_id == discount.discount_id
    assert again.percent == 40


def test_save_discount_rejects_unknown_type():
    svc, _, _ = _build()
    with pytest.raises(ValidationError) as exc:
        svc.save_discount(ADMIN, {"child_id": 10, "year": 2025, "month": 3, "discount_type": "VIP"})
    assert exc.value.details[0]["field"] == "discount_type"


def test_payments_are_admin_only():
    svc, _, _ = _build()
    payment = svc.create_payment(ADMIN, {"user_id": 7, "amount": 500, "payment_date": "2025-03-05"})
    assert payment.amount == 500
    with pytest.raises(AuthorizationError):
        svc.list_payments(PARENT)


def test_discount_types_catalog():
    kinds = {d["type"]: d["default_percent"] for d in discount_types()}
    assert kinds["DISABLED_CHILD"] == 100
    assert kinds["PREPAYMENT"] == 10
