from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import FieldErrors, optional_int, optional_str, require_choice, require_int, require_non_empty
from ..core.constants import WEEK_NUMBERS, WEEKDAYS
from ..core.enums import DishCategory, MealType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ReferenceIntegrityError
from ..groups.repository import GroupRepository
from ..users.model import CurrentUser
from .grid import MenuGrid, build_menu_grid
from .model import Dish, Placement
from .repository import MenuRepository

_EDITORS = (Role.ADMIN, Role.TEACHER)


def _ensure_editor(current: CurrentUser) -> None:
    if current.role not in _EDITORS:
        raise AuthorizationError("Only administrators and teachers can edit the menu")


class MenuService:
    def __init__(self, menu: MenuRepository, groups: GroupRepository):
        self._menu = menu
        self._groups = groups

    def _ensure_group(self, group_id: Optional[int]) -> None:
        if group_id is not None and not self._groups.get_by_id(group_id):
            raise ReferenceIntegrityError(
                "Group not found", details=[{"field": "group_id", "message": f"group {group_id} does not exist"}]
            )

    # dishes

    def list_dishes(self, *, group_id: Optional[int] = None) -> Sequence[Dish]:
        return self._menu.list_dishes(group_id=group_id)

    def _dish_fields(self, data: dict) -> dict:
        errors = FieldErrors()
        fields = {
            "dish_name": errors.check(require_non_empty, data.get("dish_name"), "dish_name"),
            "category": errors.check(require_choice, data.get("category"), "category", DishCategory),
            "weight": optional_str(data.get("weight")),
            "meal_type": None,
            "group_id": errors.check(optional_int, data.get("group_id"), "group_id", min_value=1),
        }
        if data.get("meal_type"):
            fields["meal_type"] = errors.check(require_choice, data.get("meal_type"), "meal_type", MealType)
        errors.raise_if_any()
        self._ensure_group(fields["group_id"])
        return fields

    def create_dish(self, current: CurrentUser, data: dict) -> Dish:
        _ensure_editor(current)
        menu_id = self._menu.create_dish(**self._dish_fields(data))
        return self._menu.get_dish(menu_id)

    def update_dish(self, current: CurrentUser, menu_id: int, data: dict) -> Dish:
        _ensure_editor(current)
        if not self._menu.get_dish(int(menu_id)):
            raise NotFoundError("Dish not found")
        self._menu.update_dish(int(menu_id), **self._dish_fields(data))
        return self._menu.get_dish(int(menu_id))

    def delete_dish(self, current: CurrentUser, menu_id: int) -> None:
        _ensure_editor(current)
        if not self._menu.delete_dish(int(menu_id)):
            raise NotFoundError("Dish not found")

    # weekly placements

    def _group(self, group_id: int) -> None:
        if not self._groups.get_by_id(int(group_id)):
            raise NotFoundError("Group not found")

    def placements(self, group_id: int, week_number: int) -> Sequence[Placement]:
        self._group(group_id)
        return self._menu.list_placements(int(group_id), int(week_number))

    def grid(self, group_id: int, week_number: int) -> MenuGrid:
        self._group(group_id)
        placements = self._menu.list_placements(int(group_id), int(week_number))
        dishes = {d.menu_id: d for d in self._menu.list_dishes()}
        return build_menu_grid(placements, dishes)

    def _placement_fields(self, data: dict) -> dict:
        errors = FieldErrors()
        fields = {
            "group_id": errors.check(require_int, data.get("group_id"), "group_id", min_value=1),
            "week_number": errors.check(require_choice, data.get("week_number"), "week_number", WEEK_NUMBERS),
            "meal_day": errors.check(require_choice, data.get("meal_day"), "meal_day", WEEKDAYS),
            "meal_type": errors.check(require_choice, data.get("meal_type"), "meal_type", MealType),
            "dish_id": errors.check(require_int, data.get("dish_id"), "dish_id", min_value=1),
        }
        errors.raise_if_any()
        self._ensure_group(fields["group_id"])
        if not self._menu.get_dish(fields["dish_id"]):
            raise ReferenceIntegrityError(
                "Dish not found", details=[{"field": "dish_id", "message": f"dish {fields['dish_id']} does not exist"}]
            )
        return fields

    def create_placement(self, current: CurrentUser, data: dict) -> Placement:
        _ensure_editor(current)
        placement_id = self._menu.create_placement(**self._placement_fields(data))
        return self._menu.get_placement(placement_id)

    def update_placement(self, current: CurrentUser, placement_id: int, data: dict) -> Placement:
        _ensure_editor(current)
        if not self._menu.get_placement(int(placement_id)):
            raise NotFoundError("Menu placement not found")
        self._menu.update_placement(int(placement_id), **self._placement_fields(data))
        return self._menu.get_placement(int(placement_id))

    def delete_placement(self, current: CurrentUser, placement_id: int) -> None:
        _ensure_editor(current)
        if not self._menu.delete_placement(int(placement_id)):
            raise NotFoundError("Menu placement not found")

    def clear_week(self, current: CurrentUser, group_id: int, week_number: int) -> int:
        _ensure_editor(current)
        self._group(group_id)
        return self._menu.delete_week(int(group_id), int(week_number))
