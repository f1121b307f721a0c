"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import DiscountType, DishCategory, MealType

DAILY_RATE = 194
PAID_GROUP_MONTHLY_FEE = 1300

DEFAULT_TOKEN_HOURS = 24
PASSWORD_MIN_LENGTH = 6

WEEKDAYS = (1, 2, 3, 4, 5)
WEEK_NUMBERS = (1, 2)

MEAL_TYPES = (
    MealType.BREAKFAST,
    MealType.SECOND_BREAKFAST,
    MealType.LUNCH,
    MealType.AFTERNOON_SNACK,
    MealType.DINNER,
)

MEAL_TYPE_CATEGORIES = {
    MealType.BREAKFAST: (DishCategory.SECOND_COURSE, DishCategory.THIRD_COURSE, DishCategory.DRINK),
    MealType.SECOND_BREAKFAST: (DishCategory.THIRD_COURSE, DishCategory.DRINK),
    MealType.LUNCH: (
        DishCategory.FIRST_COURSE,
        DishCategory.SECOND_COURSE,
        DishCategory.THIRD_COURSE,
        DishCategory.DRINK,
    ),
    MealType.AFTERNOON_SNACK: (DishCategory.THIRD_COURSE, DishCategory.DRINK),
    MealType.DINNER: (DishCategory.SECOND_COURSE, DishCategory.THIRD_COURSE, DishCategory.DRINK),
}

DISCOUNT_TYPES = {
    DiscountType.MANY_CHILDREN: {"label": "Large family", "default_percent": 50},
    DiscountType.DISABLED_CHILD: {"label": "Child with disability", "default_percent": 100},
    DiscountType.LOW_INCOME: {"label": "Low-income family", "default_percent": 50},
    DiscountType.SINGLE_PARENT: {"label": "Single parent", "default_percent": 30},
    DiscountType.EDUCATION_EMPLOYEE: {"label": "Education employee", "default_percent": 30},
    DiscountType.PREPAYMENT: {"label": "Prepayment", "default_percent": 10},
}

SCORE_MIN = 0
SCORE_MAX = 10

PHOTO_MAX_BYTES = 5 * 1024 * 1024
PHOTO_MIME_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
