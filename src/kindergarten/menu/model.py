from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import DishCategory, MealType


@dataclass(frozen=True)
class Dish:
    """Catalog entry; `group_id=None` marks a dish shared by every group."""

    menu_id: int
    dish_name: str
    category: DishCategory
    weight: Optional[str] = None
    meal_type: Optional[MealType] = None
    group_id: Optional[int] = None


@dataclass(frozen=True)
class Placement:
    menu_id: int
    group_id: int
    week_number: int
    meal_day: int
    meal_type: MealType
    dish_id: int
