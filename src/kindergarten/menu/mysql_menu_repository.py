from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import DishCategory, MealType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Dish, Placement
from .repository import MenuRepository


def _to_dish(r: dict) -> Dish:
    return Dish(
        menu_id=int(r["menu_id"]),
        dish_name=r["dish_name"],
        category=DishCategory(r["category"]),
        weight=r.get("weight"),
        meal_type=MealType(r["meal_type"]) if r.get("meal_type") else None,
        group_id=r.get("group_id"),
    )


def _to_placement(r: dict) -> Placement:
    return Placement(
        menu_id=int(r["menu_id"]),
        group_id=int(r["group_id"]),
        week_number=int(r["week_number"]),
        meal_day=int(r["meal_day"]),
        meal_type=MealType(r["meal_type"]),
        dish_id=int(r["dish_id"]),
    )


def _enum_value(value):
    return value.value if value is not None else None


class MySQLMenuRepository(MenuRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_dishes(self, *, group_id: Optional[int] = None) -> Sequence[Dish]:
        sql = "SELECT menu_id, dish_name, category, weight, meal_type, group_id FROM menu"
        params: tuple = ()
        if group_id is not None:
            sql += " WHERE group_id IS NULL OR group_id=%s"
            params = (int(group_id),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY category, dish_name", params)
            return [_to_dish(r) for r in fetchall(cur)]

    def get_dish(self, menu_id: int) -> Optional[Dish]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT menu_id, dish_name, category, weight, meal_type, group_id FROM menu WHERE menu_id=%s",
                (int(menu_id),),
            )
            row = fetchone(cur)
            return _to_dish(row) if row else None

    def create_dish(self, *, dish_name, category, weight, meal_type, group_id) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO menu(dish_name, category, weight, meal_type, group_id) VALUES(%s,%s,%s,%s,%s)",
                (dish_name, category.value, weight, _enum_value(meal_type), group_id),
            )
            return int(cur.lastrowid)

    def update_dish(self, menu_id: int, *, dish_name, category, weight, meal_type, group_id) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE menu SET dish_name=%s, category=%s, weight=%s, meal_type=%s, group_id=%s
                WHERE menu_id=%s
                """,
                (dish_name, category.value, weight, _enum_value(meal_type), group_id, int(menu_id)),
            )
            return cur.rowcount > 0

    def delete_dish(self, menu_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM menu WHERE menu_id=%s", (int(menu_id),))
            return cur.rowcount > 0

    def list_placements(self, group_id: int, week_number: int) -> Sequence[Placement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT menu_id, group_id, week_number, meal_day, meal_type, dish_id
                FROM weekly_menu
                WHERE group_id=%s AND week_number=%s
                ORDER BY meal_day, FIELD(meal_type, 'breakfast', 'second_breakfast', 'lunch',
                                         'afternoon_snack', 'dinner'), menu_id
                """,
                (int(group_id), int(week_number)),
            )
            return [_to_placement(r) for r in fetchall(cur)]

    def get_placement(self, menu_id: int) -> Optional[Placement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT menu_id, group_id, week_number, meal_day, meal_type, dish_id FROM weekly_menu WHERE menu_id=%s",
                (int(menu_id),),
            )
            row = fetchone(cur)
            return _to_placement(row) if row else None

    def create_placement(self, *, group_id, week_number, meal_day, meal_type, dish_id) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO weekly_menu(group_id, week_number, meal_day, meal_type, dish_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(group_id), int(week_number), int(meal_day), meal_type.value, int(dish_id)),
            )
            return int(cur.lastrowid)

    def update_placement(self, menu_id: int, *, group_id, week_number, meal_day, meal_type, dish_id) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE weekly_menu SET group_id=%s, week_number=%s, meal_day=%s, meal_type=%s, dish_id=%s
                WHERE menu_id=%s
                """,
                (int(group_id), int(week_number), int(meal_day), meal_type.value, int(dish_id), int(menu_id)),
            )
            return cur.rowcount > 0

    def delete_placement(self, menu_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM weekly_menu WHERE menu_id=%s", (int(menu_id),))
            return cur.rowcount > 0

    def delete_week(self, group_id: int, week_number: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM weekly_menu WHERE group_id=%s AND week_number=%s", (int(group_id), int(week_number))
            )
            return int(cur.rowcount)
