from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import AssignmentStatus
from .model import Assignment, Sale


class AssignmentRepository(Protocol):
    def atomic(self) -> ContextManager:
        """Transaction scope shared with the sale repository."""

        raise NotImplementedError

    def has_any(self, employee_id: int, product_id: int) -> bool:
        """Whether the product was ever assigned to the employee, on any day."""

        raise NotImplementedError

    def get_for_day(
        self, employee_id: int, product_id: int, day: date, *, for_update: bool = False
    ) -> Optional[Assignment]:
        raise NotImplementedError

    def upsert(self, *, employee_id: int, product_id: int, day: date, quantity: int) -> int:
        """Insert with status 'assigned' or update the quantity of the same-day row."""

        raise NotImplementedError

    def update_reconciliation(self, *, assignment_id: int, status: AssignmentStatus, expired_quantity: int) -> bool:
        raise NotImplementedError

    def list_open_for_day(self, day: date) -> Sequence[Assignment]:
        """Assignments of the day still 'assigned' or 'partially_sold'."""

        raise NotImplementedError

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
        raise NotImplementedError

    def count(
        self,
        *,
        employee_id: Optional[int] = None,
        product_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError


class SaleRepository(Protocol):
    def get_for_day(self, employee_id: int, product_id: int, sale_date: date) -> Optional[Sale]:
        raise NotImplementedError

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
        """Keyed by (employee_id, product_id, sale_date): overwrite, never append."""

        raise NotImplementedError

    def sum_quantity_for_day(self, employee_id: int, product_id: int, sale_date: date) -> int:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, offset: int = 0, limit: int = 10) -> Sequence[Sale]:
        raise NotImplementedError

    def count_for_employee(self, employee_id: int) -> int:
        raise NotImplementedError
