from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import AssignmentStatus


@dataclass(frozen=True)
class Assignment:
    """Daily allotment of product units given to an employee (local day)."""

    assignment_id: int
    employee_id: int
    product_id: int
    quantity: int
    assigned_at: date
    status: AssignmentStatus = AssignmentStatus.ASSIGNED
    expired_quantity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.assignment_id,
            "employee_id": self.employee_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "assigned_at": self.assigned_at.isoformat(),
            "status": self.status.value,
            "expired_quantity": self.expired_quantity,
        }


@dataclass(frozen=True)
class Sale:
    """Units of an assignment sold on its day; one row per (employee, product, day)."""

    sale_id: int
    employee_id: int
    product_id: int
    employee_product_id: int
    quantity: int
    amount: Decimal
    sale_date: date
    sold_at: datetime
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.sale_id,
            "employee_id": self.employee_id,
            "product_id": self.product_id,
            "employee_product_id": self.employee_product_id,
            "quantity": self.quantity,
            "amount": str(self.amount),
            "date": self.sale_date.isoformat(),
            "sold_at": self.sold_at.isoformat(),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class SaleEntry:
    """One validated line of a record-sales request."""

    product_id: int
    quantity: int
    amount: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class Page:
    items: Sequence[Any]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size) if self.page_size else 0
