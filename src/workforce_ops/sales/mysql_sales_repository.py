from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, ContextManager, Optional, Sequence

from ..common.datetime_utils import to_naive_utc
from ..core.enums import AssignmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, transaction
from .model import Assignment, Sale
from .repository import AssignmentRepository, SaleRepository

_ASSIGNMENT_SELECT = """
    SELECT assignment_id, employee_id, product_id, quantity, assigned_at, status, expired_quantity
    FROM employee_products
"""

_SALE_SELECT = """
    SELECT sale_id, employee_id, product_id, employee_product_id, quantity, amount, sale_date, sold_at, notes
    FROM sales
"""


def _to_assignment(r: dict[str, Any]) -> Assignment:
    return Assignment(
        assignment_id=int(r["assignment_id"]),
        employee_id=int(r["employee_id"]),
        product_id=int(r["product_id"]),
        quantity=int(r["quantity"]),
        assigned_at=r["assigned_at"],
        status=AssignmentStatus(r["status"]),
        expired_quantity=int(r.get("expired_quantity") or 0),
    )


def _to_sale(r: dict[str, Any]) -> Sale:
    return Sale(
        sale_id=int(r["sale_id"]),
        employee_id=int(r["employee_id"]),
        product_id=int(r["product_id"]),
        employee_product_id=int(r["employee_product_id"]),
        quantity=int(r["quantity"]),
        amount=Decimal(str(r["amount"])),
        sale_date=r["sale_date"],
        sold_at=r["sold_at"].replace(tzinfo=timezone.utc),
        notes=r.get("notes"),
    )


def _assignment_filters(
    employee_id: Optional[int],
    product_id: Optional[int],
    date_from: Optional[date],
    date_to: Optional[date],
) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if employee_id is not None:
        clauses.append("employee_id=%s")
        params.append(int(employee_id))
    if product_id is not None:
        clauses.append("product_id=%s")
        params.append(int(product_id))
    if date_from is not None:
        clauses.append("assigned_at >= %s")
        params.append(date_from)
    if date_to is not None:
        clauses.append("assigned_at <= %s")
        params.append(date_to)
    return " AND ".join(clauses), params


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def atomic(self) -> ContextManager:
        return transaction(self._conn_factory)

    def has_any(self, employee_id: int, product_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM employee_products WHERE employee_id=%s AND product_id=%s LIMIT 1",
                (int(employee_id), int(product_id)),
            )
            return fetchone(cur) is not None

    def get_for_day(
        self, employee_id: int, product_id: int, day: date, *, for_update: bool = False
    ) -> Optional[Assignment]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ASSIGNMENT_SELECT} WHERE employee_id=%s AND product_id=%s AND assigned_at=%s{lock}",
                (int(employee_id), int(product_id), day),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def upsert(self, *, employee_id: int, product_id: int, day: date, quantity: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_products(employee_id, product_id, quantity, assigned_at, status, expired_quantity)
                VALUES(%s,%s,%s,%s,%s,0)
                ON DUPLICATE KEY UPDATE
                    quantity=VALUES(quantity),
                    assignment_id=LAST_INSERT_ID(assignment_id)
                """,
                (int(employee_id), int(product_id), int(quantity), day, AssignmentStatus.ASSIGNED.value),
            )
            return int(cur.lastrowid)

    def update_reconciliation(self, *, assignment_id: int, status: AssignmentStatus, expired_quantity: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee_products SET status=%s, expired_quantity=%s WHERE assignment_id=%s",
                (status.value, int(expired_quantity), int(assignment_id)),
            )
            return cur.rowcount > 0

    def list_open_for_day(self, day: date) -> Sequence[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ASSIGNMENT_SELECT} WHERE assigned_at=%s AND status IN (%s, %s) ORDER BY assignment_id",
                (day, AssignmentStatus.ASSIGNED.value, AssignmentStatus.PARTIALLY_SOLD.value),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        product_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Sequence[Assignment]:
        where, params = _assignment_filters(employee_id, product_id, date_from, date_to)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ASSIGNMENT_SELECT} WHERE {where} ORDER BY assigned_at DESC, assignment_id DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def count(
        self,
        *,
        employee_id: Optional[int] = None,
        product_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        where, params = _assignment_filters(employee_id, product_id, date_from, date_to)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM employee_products WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0


class MySQLSaleRepository(SaleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, employee_id: int, product_id: int, sale_date: date) -> Optional[Sale]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SALE_SELECT} WHERE employee_id=%s AND product_id=%s AND sale_date=%s",
                (int(employee_id), int(product_id), sale_date),
            )
            r = fetchone(cur)
            return _to_sale(r) if r else None

    def upsert_for_day(
        self,
        *,
        employee_id: int,
        product_id: int,
        sale_date: date,
        employee_product_id: int,
        quantity: int,
        amount: Decimal,
        sold_at: datetime,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sales(employee_id, product_id, employee_product_id, quantity, amount, sale_date, sold_at, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    employee_product_id=VALUES(employee_product_id),
                    quantity=VALUES(quantity),
                    amount=VALUES(amount),
                    notes=VALUES(notes),
                    sold_at=VALUES(sold_at),
                    sale_id=LAST_INSERT_ID(sale_id)
                """,
                (
                    int(employee_id),
                    int(product_id),
                    int(employee_product_id),
                    int(quantity),
                    amount,
                    sale_date,
                    to_naive_utc(sold_at),
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def sum_quantity_for_day(self, employee_id: int, product_id: int, sale_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(quantity), 0) AS sold
                FROM sales
                WHERE employee_id=%s AND product_id=%s AND sale_date=%s
                """,
                (int(employee_id), int(product_id), sale_date),
            )
            r = fetchone(cur)
            return int(r["sold"]) if r else 0

    def list_for_employee(self, employee_id: int, *, offset: int = 0, limit: int = 10) -> Sequence[Sale]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SALE_SELECT} WHERE employee_id=%s ORDER BY sale_date DESC, sale_id DESC LIMIT %s OFFSET %s",
                (int(employee_id), int(limit), int(offset)),
            )
            return [_to_sale(r) for r in fetchall(cur)]

    def count_for_employee(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM sales WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
