from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from workforce_ops.common.clock import FixedClock
from workforce_ops.core.enums import AssignmentStatus
from workforce_ops.core.exceptions import NoAssignmentToday, NotAssigned, QuantityOutOfRange, ValidationError
from workforce_ops.sales.service import parse_sale_entries

TODAY = date(2026, 2, 2)


def sale(product_id=1, quantity=4, amount="40.00", **extra):
    return {"product_id": product_id, "quantity": quantity, "amount": amount, **extra}


def test_partial_then_full_sale_same_day(sales_service, sales_store):
    assignment = sales_service.upsert_assignment(7, 1, 10)

    sales_service.record_sales(7, sale(quantity=4))
    a = sales_store.assignments[assignment.assignment_id]
    assert a.status == AssignmentStatus.PARTIALLY_SOLD
    assert a.expired_quantity == 6

    written = sales_service.record_sales(7, sale(quantity=10, amount="100.00"))
    a = sales_store.assignments[assignment.assignment_id]
    assert a.status == AssignmentStatus.SOLD
    assert a.expired_quantity == 0

    assert len(sales_store.sales) == 1
    only = next(iter(sales_store.sales.values()))
    assert only.quantity == 10
    assert only.amount == Decimal("100.00")
    assert written[0].sale_id == only.sale_id
    assert only.employee_product_id == assignment.assignment_id


def test_resubmitting_a_sale_refreshes_sold_at(sales_service, sales_store, clock):
    sales_service.upsert_assignment(7, 1, 10)
    sales_service.record_sales(7, sale(quantity=4))

    clock.advance(hours=2)
    written = sales_service.record_sales(7, sale(quantity=6))

    assert written[0].sold_at == clock.now()
    assert next(iter(sales_store.sales.values())).sold_at == clock.now()


def test_zero_quantity_sale_expires_assignment(sales_service, sales_store):
    assignment = sales_service.upsert_assignment(7, 1, 10)

    sales_service.record_sales(7, sale(quantity=0, amount=0))

    a = sales_store.assignments[assignment.assignment_id]
    assert a.status == AssignmentStatus.EXPIRED
    assert a.expired_quantity == 10


@pytest.mark.parametrize("quantity", [11, -1])
def test_out_of_range_quantity_leaves_state_unchanged(sales_service, sales_store, quantity):
    assignment = sales_service.upsert_assignment(7, 1, 10)
    sales_service.record_sales(7, sale(quantity=4))
    before = (dict(sales_store.assignments), dict(sales_store.sales))

    with pytest.raises(QuantityOutOfRange) as exc:
        sales_service.record_sales(7, sale(quantity=quantity))

    assert exc.value.product_id == 1
    assert (sales_store.assignments, sales_store.sales) == before
    assert sales_store.assignments[assignment.assignment_id].status == AssignmentStatus.PARTIALLY_SOLD


def test_product_never_assigned_is_rejected(sales_service):
    with pytest.raises(NotAssigned) as exc:
        sales_service.record_sales(7, sale(product_id=99))
    assert exc.value.employee_id == 7
    assert exc.value.product_id == 99


def test_assignment_from_another_day_is_not_today(sales_service, sales_store):
    sales_service.upsert_assignment(7, 1, 10, day=TODAY - timedelta(days=1))

    with pytest.raises(NoAssignmentToday):
        sales_service.record_sales(7, sale())
    assert sales_store.sales == {}


def test_batch_is_all_or_nothing(sales_service, sales_store):
    sales_service.upsert_assignment(7, 1, 10)
    sales_service.upsert_assignment(7, 2, 5)

    with pytest.raises(QuantityOutOfRange):
        sales_service.record_sales(7, [sale(product_id=1, quantity=3), sale(product_id=2, quantity=6)])

    assert sales_store.sales == {}
    assert all(a.status == AssignmentStatus.ASSIGNED for a in sales_store.assignments.values())


def test_batch_records_each_product(sales_service, sales_store):
    first = sales_service.upsert_assignment(7, 1, 10)
    second = sales_service.upsert_assignment(7, 2, 5)

    written = sales_service.record_sales(7, [sale(product_id=1, quantity=10), sale(product_id=2, quantity=2)])

    assert [s.product_id for s in written] == [1, 2]
    assert sales_store.assignments[first.assignment_id].status == AssignmentStatus.SOLD
    assert sales_store.assignments[second.assignment_id].status == AssignmentStatus.PARTIALLY_SOLD
    assert sales_store.assignments[second.assignment_id].expired_quantity == 3


def test_missing_fields_are_a_validation_error(sales_service):
    sales_service.upsert_assignment(7, 1, 10)

    with pytest.raises(ValidationError):
        sales_service.record_sales(7, {"product_id": 1, "quantity": 2})
    with pytest.raises(ValidationError):
        sales_service.record_sales(7, [])


def test_parse_sale_entries_normalises_values():
    entries = parse_sale_entries([sale(product_id="3", quantity="2", amount="12.5", notes="  ")])

    assert entries[0].product_id == 3
    assert entries[0].quantity == 2
    assert entries[0].amount == Decimal("12.5")
    assert entries[0].notes is None


def test_upsert_assignment_updates_same_day_row(sales_service, sales_store):
    first = sales_service.upsert_assignment(7, 1, 10)
    second = sales_service.upsert_assignment(7, 1, 12)

    assert second.assignment_id == first.assignment_id
    assert second.quantity == 12
    assert second.status == AssignmentStatus.ASSIGNED
    assert len(sales_store.assignments) == 1


def test_upsert_assignment_requires_positive_quantity(sales_service):
    with pytest.raises(ValidationError):
        sales_service.upsert_assignment(7, 1, 0)


def test_expire_assignments_reconciles_open_rows(sales_service, sales_store):
    untouched = sales_service.upsert_assignment(7, 1, 10)
    sold_out = sales_service.upsert_assignment(7, 2, 2)
    sales_service.record_sales(7, sale(product_id=2, quantity=2))

    count = sales_service.expire_assignments()

    assert count == 1
    assert sales_store.assignments[untouched.assignment_id].status == AssignmentStatus.EXPIRED
    assert sales_store.assignments[untouched.assignment_id].expired_quantity == 10
    assert sales_store.assignments[sold_out.assignment_id].status == AssignmentStatus.SOLD


def test_sales_bucket_is_local_day(make_sales_service):
    # 16:00 UTC is already the next day in Tokyo.
    clock = FixedClock(current=datetime(2026, 2, 2, 16, 0, tzinfo=timezone.utc), tz=ZoneInfo("Asia/Tokyo"))

    svc = make_sales_service(clock)
    assignment = svc.upsert_assignment(7, 1, 10)
    written = svc.record_sales(7, sale(quantity=1))

    assert assignment.assigned_at == date(2026, 2, 3)
    assert written[0].sale_date == date(2026, 2, 3)


def test_notification_failure_does_not_fail_sale(make_sales_service, sales_store, clock, failing_notifier):
    svc = make_sales_service(clock, notifier=failing_notifier)
    svc.upsert_assignment(7, 1, 10)

    written = svc.record_sales(7, sale(quantity=5))

    assert written[0].quantity == 5
    assert len(sales_store.sales) == 1


def test_sale_notifies_admin_and_employee(sales_service, notifier):
    sales_service.upsert_assignment(7, 1, 10)
    sales_service.record_sales(7, sale())

    assert notifier.types() == ["employee_product_assigned", "admin_sale_created", "employee_sale_created"]


def test_list_sales_and_assignments(sales_service):
    sales_service.upsert_assignment(7, 1, 10, day=TODAY - timedelta(days=1))
    sales_service.upsert_assignment(7, 1, 10)
    sales_service.upsert_assignment(8, 1, 3)
    sales_service.record_sales(7, sale())

    sales = sales_service.list_sales(7)
    assert sales.total == 1

    mine = sales_service.list_assignments(employee_id=7)
    assert mine.total == 2
    assert [a.assigned_at for a in mine.items] == [TODAY, TODAY - timedelta(days=1)]

    today_only = sales_service.list_assignments(date_from=TODAY, page_size=1)
    assert today_only.total == 2
    assert len(today_only.items) == 1
    assert today_only.total_pages == 2
