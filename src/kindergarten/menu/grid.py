"""Weekly menu grid: weekday -> meal type -> dish category -> dishes.

Works on placements and catalog rows that were already fetched. Placements
that cannot be shown are reported, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..core.constants import MEAL_TYPE_CATEGORIES, MEAL_TYPES, WEEKDAYS
from .model import Dish, Placement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnresolvedPlacement:
    placement_id: int
    dish_id: int
    meal_day: int
    meal_type: str
    reason: str


@dataclass
class MenuGrid:
    days: dict[int, dict[str, dict[str, list[dict]]]] = field(default_factory=dict)
    unresolved: list[UnresolvedPlacement] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "days": {str(day): meals for day, meals in self.days.items()},
            "unresolved": [
                {
                    "placement_id": u.placement_id,
                    "dish_id": u.dish_id,
                    "meal_day": u.meal_day,
                    "meal_type": u.meal_type,
                    "reason": u.reason,
                }
                for u in self.unresolved
            ],
        }


def empty_grid() -> dict[int, dict[str, dict[str, list[dict]]]]:
    return {
        day: {meal.value: {cat.value: [] for cat in MEAL_TYPE_CATEGORIES[meal]} for meal in MEAL_TYPES}
        for day in WEEKDAYS
    }


def _dish_dict(placement: Placement, dish: Dish) -> dict:
    return {
        "placement_id": placement.menu_id,
        "dish_id": dish.menu_id,
        "dish_name": dish.dish_name,
        "category": dish.category.value,
        "weight": dish.weight,
    }


def build_menu_grid(placements: Iterable[Placement], dishes: Mapping[int, Dish]) -> MenuGrid:
    grid = MenuGrid(days=empty_grid())

    for p in placements:
        meal = p.meal_type.value
        slot = grid.days.get(p.meal_day, {}).get(meal)
        dish = dishes.get(p.dish_id)

        if slot is None:
            reason = f"day {p.meal_day} is not a weekday slot"
        elif dish is None:
            reason = "dish not found"
        elif dish.category.value not in slot:
            reason = f"category {dish.category.value} is not served at {meal}"
        else:
            slot[dish.category.value].append(_dish_dict(p, dish))
            continue

        grid.unresolved.append(UnresolvedPlacement(p.menu_id, p.dish_id, p.meal_day, meal, reason))

    if grid.unresolved:
        logger.warning(
            "%d menu placement(s) left out of the grid: %s",
            len(grid.unresolved),
            [(u.placement_id, u.reason) for u in grid.unresolved],
        )
    return grid
