from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence, Union

from ..common.clock import Clock
from ..common.datetime_utils import local_day_bucket
from ..common.validators import (
    optional_text,
    page_params,
    require_decimal,
    require_int,
    require_positive_int,
)
from ..core.constants import DEFAULT_ASSIGNMENTS_PAGE_SIZE
from ..core.exceptions import (
    NoAssignmentToday,
    NotAssigned,
    NotFound,
    QuantityOutOfRange,
    ValidationError,
)
from ..notifications.dispatcher import NotificationDispatcher, notify_safely
from ..notifications.model import NotificationTarget
from .model import Assignment, Page, Sale, SaleEntry
from .reconciliation import reconcile
from .repository import AssignmentRepository, SaleRepository

logger = logging.getLogger(__name__)

SalePayload = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def parse_sale_entries(payload: SalePayload) -> list[SaleEntry]:
    """Accept a single sale object or a list of them."""
    items = [payload] if isinstance(payload, Mapping) else list(payload or [])
    if not items:
        raise ValidationError("At least one sale is required")

    entries = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ValidationError("Each sale must be an object")
        if item.get("product_id") in (None, "") or item.get("quantity") is None or item.get("amount") is None:
            raise ValidationError("Missing required sale fields")
        amount = require_decimal(item["amount"], "amount")
        if amount < 0:
            raise ValidationError("amount must not be negative")
        entries.append(
            SaleEntry(
                product_id=require_positive_int(item["product_id"], "product_id"),
                quantity=require_int(item["quantity"], "quantity"),
                amount=amount,
                notes=optional_text(item.get("notes")),
            )
        )
    return entries


class SalesService:
    """Daily product assignments and the sales recorded against them.

    Assignments and sales are bucketed by the server-local calendar day.
    """

    def __init__(
        self,
        assignments: AssignmentRepository,
        sales: SaleRepository,
        clock: Clock,
        *,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self._assignments = assignments
        self._sales = sales
        self._clock = clock
        self._notifier = notifier

    def today(self) -> date:
        return local_day_bucket(self._clock.now(), self._clock.tz)

    def record_sales(self, employee_id: int, payload: SalePayload) -> list[Sale]:
        """Upsert today's sale per product and reconcile each assignment.

        Every entry is validated before anything is written; one bad entry fails the request.
        """
        entries = parse_sale_entries(payload)
        now = self._clock.now()
        today = local_day_bucket(now, self._clock.tz)

        with self._assignments.atomic():
            owners = [self._assignment_for_sale(employee_id, entry, today) for entry in entries]

            written: list[Sale] = []
            for entry, assignment in zip(entries, owners):
                self._sales.upsert_for_day(
                    employee_id=employee_id,
                    product_id=entry.product_id,
                    sale_date=today,
                    employee_product_id=assignment.assignment_id,
                    quantity=entry.quantity,
                    amount=entry.amount,
                    sold_at=now,
                    notes=entry.notes,
                )
                self._reconcile(assignment)
                written.append(self._sales.get_for_day(employee_id, entry.product_id, today))

        for sale in written:
            logger.info(
                "Employee %s recorded %d unit(s) of product %s for %s",
                employee_id,
                sale.quantity,
                sale.product_id,
                today,
            )
            self._notify_sale(employee_id, sale)
        return written

    def upsert_assignment(
        self,
        employee_id: int,
        product_id: int,
        quantity: int,
        *,
        day: Optional[date] = None,
    ) -> Assignment:
        employee_id = require_positive_int(employee_id, "employee_id")
        product_id = require_positive_int(product_id, "product_id")
        quantity = require_positive_int(quantity, "quantity")
        day = day or self.today()

        with self._assignments.atomic():
            self._assignments.upsert(employee_id=employee_id, product_id=product_id, day=day, quantity=quantity)
            assignment = self._assignments.get_for_day(employee_id, product_id, day)
        if assignment is None:
            raise NotFound("Assignment could not be stored", employee_id=employee_id, product_id=product_id, day=day)

        logger.info("Assigned %d unit(s) of product %s to employee %s for %s", quantity, product_id, employee_id, day)
        notify_safely(
            self._notifier,
            target=NotificationTarget.employee(employee_id),
            type="employee_product_assigned",
            message=f"You have been assigned {quantity} unit(s) of product {product_id} for {day.isoformat()}.",
            meta={"assignment_id": assignment.assignment_id, "product_id": product_id},
        )
        return assignment

    def expire_assignments(self, day: Optional[date] = None) -> int:
        """End-of-day sweep: reconcile every assignment of the day that is still open."""
        day = day or self.today()
        count = 0
        with self._assignments.atomic():
            for assignment in self._assignments.list_open_for_day(day):
                self._reconcile(assignment)
                count += 1
        logger.info("Reconciled %d open assignment(s) for %s", count, day)
        return count

    def list_sales(self, employee_id: int, *, page: int = 1, page_size: int = 10) -> Page:
        page, page_size = page_params(page, page_size)
        total = self._sales.count_for_employee(employee_id)
        items = self._sales.list_for_employee(employee_id, offset=(page - 1) * page_size, limit=page_size)
        return Page(items=list(items), total=total, page=page, page_size=page_size)

    def list_assignments(
        self,
        *,
        employee_id: Optional[int] = None,
        product_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        page_size: int = DEFAULT_ASSIGNMENTS_PAGE_SIZE,
    ) -> Page:
        page, page_size = page_params(page, page_size, default_size=DEFAULT_ASSIGNMENTS_PAGE_SIZE)
        filters = dict(employee_id=employee_id, product_id=product_id, date_from=date_from, date_to=date_to)
        total = self._assignments.count(**filters)
        items = self._assignments.list(**filters, offset=(page - 1) * page_size, limit=page_size)
        return Page(items=list(items), total=total, page=page, page_size=page_size)

    def _assignment_for_sale(self, employee_id: int, entry: SaleEntry, today: date) -> Assignment:
        context = dict(employee_id=employee_id, product_id=entry.product_id, day=today)
        if not self._assignments.has_any(employee_id, entry.product_id):
            raise NotAssigned(f"Product {entry.product_id} is not assigned to you.", **context)

        assignment = self._assignments.get_for_day(employee_id, entry.product_id, today, for_update=True)
        if assignment is None:
            raise NoAssignmentToday(f"No assignment found for product {entry.product_id} today.", **context)

        if entry.quantity < 0 or entry.quantity > assignment.quantity:
            raise QuantityOutOfRange(
                f"Quantity for product {entry.product_id} must be between 0 and {assignment.quantity}.",
                **context,
            )
        return assignment

    def _reconcile(self, assignment: Assignment) -> None:
        sold = self._sales.sum_quantity_for_day(assignment.employee_id, assignment.product_id, assignment.assigned_at)
        result = reconcile(assignment.quantity, sold)
        self._assignments.update_reconciliation(
            assignment_id=assignment.assignment_id,
            status=result.status,
            expired_quantity=result.expired_quantity,
        )
        logger.debug(
            "Assignment %s reconciled: sold=%d status=%s expired=%d",
            assignment.assignment_id,
            sold,
            result.status.value,
            result.expired_quantity,
        )

    def _notify_sale(self, employee_id: int, sale: Sale) -> None:
        meta = {"sale_id": sale.sale_id, "product_id": sale.product_id, "quantity": sale.quantity}
        notify_safely(
            self._notifier,
            target=NotificationTarget.admins(),
            type="admin_sale_created",
            message=(
                f"Employee {employee_id} recorded a sale: {sale.amount} for product {sale.product_id} "
                f"on {sale.sale_date.isoformat()}."
            ),
            meta={"employee_id": employee_id, **meta},
        )
        notify_safely(
            self._notifier,
            target=NotificationTarget.employee(employee_id),
            type="employee_sale_created",
            message=f"You recorded a sale: {sale.amount} for product {sale.product_id} on {sale.sale_date.isoformat()}.",
            meta=meta,
        )
