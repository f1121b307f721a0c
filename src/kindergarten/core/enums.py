from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"
    PSYCHOLOGIST = "psychologist"


STAFF_ROLES = (Role.ADMIN, Role.TEACHER, Role.PSYCHOLOGIST)


class ApplicationStatus(str, Enum):
    """Approval state of a paid service application."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    SECOND_BREAKFAST = "second_breakfast"
    LUNCH = "lunch"
    AFTERNOON_SNACK = "afternoon_snack"
    DINNER = "dinner"


class DishCategory(str, Enum):
    FIRST_COURSE = "first_course"
    SECOND_COURSE = "second_course"
    THIRD_COURSE = "third_course"
    DRINK = "drink"


class DiscountType(str, Enum):
    MANY_CHILDREN = "MANY_CHILDREN"
    DISABLED_CHILD = "DISABLED_CHILD"
    LOW_INCOME = "LOW_INCOME"
    SINGLE_PARENT = "SINGLE_PARENT"
    EDUCATION_EMPLOYEE = "EDUCATION_EMPLOYEE"
    PREPAYMENT = "PREPAYMENT"
