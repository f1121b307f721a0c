from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import DishCategory, MealType
from .model import Dish, Placement


class MenuRepository(Protocol):
    def list_dishes(self, *, group_id: Optional[int] = None) -> Sequence[Dish]:
        """Shared dishes plus, when `group_id` is given, that group's own dishes."""

        raise NotImplementedError

    def get_dish(self, menu_id: int) -> Optional[Dish]:
        raise NotImplementedError

    def create_dish(
        self,
        *,
        dish_name: str,
        category: DishCategory,
        weight: Optional[str],
        meal_type: Optional[MealType],
        group_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_dish(
        self,
        menu_id: int,
        *,
        dish_name: str,
        category: DishCategory,
        weight: Optional[str],
        meal_type: Optional[MealType],
        group_id: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def delete_dish(self, menu_id: int) -> bool:
        raise NotImplementedError

    def list_placements(self, group_id: int, week_number: int) -> Sequence[Placement]:
        raise NotImplementedError

    def get_placement(self, menu_id: int) -> Optional[Placement]:
        raise NotImplementedError

    def create_placement(
        self, *, group_id: int, week_number: int, meal_day: int, meal_type: MealType, dish_id: int
    ) -> int:
        raise NotImplementedError

    def update_placement(
        self, menu_id: int, *, group_id: int, week_number: int, meal_day: int, meal_type: MealType, dish_id: int
    ) -> bool:
        raise NotImplementedError

    def delete_placement(self, menu_id: int) -> bool:
        raise NotImplementedError

    def delete_week(self, group_id: int, week_number: int) -> int:
        raise NotImplementedError
