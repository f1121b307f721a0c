from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..children.access import ChildScope
from ..core.enums import DiscountType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import BillableChild, Discount, Payment
from .repository import FinanceRepository

_PAYMENT_SELECT = """
    SELECT p.payment_id, p.user_id, p.amount, p.payment_date, u.first_name, u.last_name
    FROM payments p
    JOIN users u ON u.user_id = p.user_id
"""


def _to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        user_id=int(r["user_id"]),
        amount=float(r["amount"]),
        payment_date=r["payment_date"],
        payer_name=f"{r['first_name']} {r['last_name']}" if r.get("first_name") else None,
    )


def _to_discount(r: dict) -> Discount:
    return Discount(
        discount_id=int(r["discount_id"]),
        child_id=int(r["child_id"]),
        year=int(r["year"]),
        month=int(r["month"]),
        discount_type=DiscountType(r["discount_type"]),
        percent=float(r["percent"]),
        reason=r.get("reason"),
    )


def _period_clauses(start: Optional[date], end: Optional[date]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append("p.payment_date >= %s")
        params.append(start)
    if end is not None:
        clauses.append("p.payment_date <= %s")
        params.append(end)
    return clauses, params


class MySQLFinanceRepository(FinanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_payments(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payment]:
        clauses, params = _period_clauses(start, end)
        if user_id is not None:
            clauses.append("p.user_id=%s")
            params.append(int(user_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_PAYMENT_SELECT} {where} ORDER BY p.payment_date DESC", tuple(params))
            return [_to_payment(r) for r in fetchall(cur)]

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_PAYMENT_SELECT + " WHERE p.payment_id=%s", (int(payment_id),))
            row = fetchone(cur)
            return _to_payment(row) if row else None

    def create_payment(self, *, user_id: int, amount: float, payment_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO payments(user_id, amount, payment_date) VALUES(%s,%s,%s)",
                (int(user_id), amount, payment_date),
            )
            return int(cur.lastrowid)

    def update_payment(self, payment_id: int, *, user_id: int, amount: float, payment_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payments SET user_id=%s, amount=%s, payment_date=%s WHERE payment_id=%s",
                (int(user_id), amount, payment_date, int(payment_id)),
            )
            return cur.rowcount > 0

    def delete_payment(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE payment_id=%s", (int(payment_id),))
            return cur.rowcount > 0

    def payment_stats(self, *, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        clauses, params = _period_clauses(start, end)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total_payments,
                       COALESCE(SUM(p.amount), 0) AS total_amount,
                       AVG(p.amount) AS average_amount,
                       MIN(p.amount) AS min_amount,
                       MAX(p.amount) AS max_amount
                FROM payments p
                {where}
                """,
                tuple(params),
            )
            row = fetchone(cur) or {}

        def _num(key):
            return float(row[key]) if row.get(key) is not None else None

        return {
            "total_payments": int(row.get("total_payments") or 0),
            "total_amount": _num("total_amount") or 0.0,
            "average_amount": _num("average_amount"),
            "min_amount": _num("min_amount"),
            "max_amount": _num("max_amount"),
        }

    def list_discounts(self, *, year: int, month: int, child_ids: Optional[Sequence[int]] = None) -> Sequence[Discount]:
        clauses = ["year=%s", "month=%s"]
        params: list[object] = [int(year), int(month)]
        if child_ids is not None:
            if not child_ids:
                return []
            clauses.append(f"child_id IN ({placeholders(child_ids)})")
            params.extend(int(c) for c in child_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT discount_id, child_id, year, month, discount_type, percent, reason
                FROM discounts
                WHERE {' AND '.join(clauses)}
                ORDER BY child_id, discount_id
                """,
                tuple(params),
            )
            return [_to_discount(r) for r in fetchall(cur)]

    def upsert_discount(
        self,
        *,
        child_id: int,
        year: int,
        month: int,
        discount_type: DiscountType,
        percent: float,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO discounts(child_id, year, month, discount_type, percent, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    percent=VALUES(percent),
                    reason=VALUES(reason),
                    discount_id=LAST_INSERT_ID(discount_id)
                """,
                (int(child_id), int(year), int(month), discount_type.value, percent, reason),
            )
            return int(cur.lastrowid)

    def delete_discount(self, discount_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM discounts WHERE discount_id=%s", (int(discount_id),))
            return cur.rowcount > 0

    def billable_children(self, scope: ChildScope) -> Sequence[BillableChild]:
        clauses: list[str] = []
        params: list[object] = []
        if scope.parent_id is not None:
            clauses.append("c.parent_id=%s")
            params.append(int(scope.parent_id))
        if scope.group_ids is not None:
            if not scope.group_ids:
                return []
            clauses.append(f"c.group_id IN ({placeholders(scope.group_ids)})")
            params.extend(int(g) for g in scope.group_ids)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT c.child_id, c.name, c.parent_id, c.group_id, g.group_name, g.is_paid
                FROM children c
                LEFT JOIN child_groups g ON g.group_id = c.group_id
                {where}
                ORDER BY c.name
                """,
                tuple(params),
            )
            return [
                BillableChild(
                    child_id=int(r["child_id"]),
                    name=r["name"],
                    parent_id=r.get("parent_id"),
                    group_id=r.get("group_id"),
                    group_name=r.get("group_name"),
                    is_paid_group=bool(r.get("is_paid")),
                )
                for r in fetchall(cur)
            ]
