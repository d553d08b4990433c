from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

import pytest

from workforce_ops.attendance.model import AttendanceRecord
from workforce_ops.attendance.service import AttendanceService
from workforce_ops.common.clock import FixedClock
from workforce_ops.core.enums import AssignmentStatus, AttendanceStatus
from workforce_ops.core.exceptions import DuplicateKeyError
from workforce_ops.sales.model import Assignment, Sale
from workforce_ops.sales.service import SalesService
from workforce_ops.settings.model import AttendanceSettings


class InMemorySettings:
    def __init__(self, settings: Optional[AttendanceSettings] = None):
        self.settings = settings or AttendanceSettings()

    def get(self) -> AttendanceSettings:
        return self.settings

    def save(self, settings: AttendanceSettings) -> None:
        self.settings = settings


class InMemoryAttendance:
    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    @contextmanager
    def atomic(self):
        snapshot = (dict(self._by_id), self._id)
        try:
            yield
        except Exception:
            self._by_id, self._id = snapshot
            raise

    def get_for_employee_and_date(self, employee_id: int, work_date: date, *, for_update: bool = False):
        for r in self._by_id.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def add(self, record: AttendanceRecord) -> None:
        self._id = max(self._id, record.attendance_id)
        self._by_id[record.attendance_id] = record

    def create_checkin(self, *, employee_id, work_date, check_in_time, status, notes=None) -> int:
        if self.get_for_employee_and_date(employee_id, work_date) is not None:
            raise DuplicateKeyError("duplicate")
        self._id += 1
        self._by_id[self._id] = AttendanceRecord(
            attendance_id=self._id,
            employee_id=employee_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            notes=notes,
        )
        return self._id

    def update_checkin(self, *, attendance_id, check_in_time, status, notes=None) -> bool:
        r = self._by_id[attendance_id]
        self._by_id[attendance_id] = replace(r, check_in_time=check_in_time, status=status, notes=notes)
        return True

    def update_checkout(self, *, attendance_id, check_out_time, work_hours, notes=None) -> bool:
        r = self._by_id[attendance_id]
        self._by_id[attendance_id] = replace(
            r, check_out_time=check_out_time, work_hours=work_hours, notes=notes, check_out_undone=False
        )
        return True

    def revoke_checkout(self, *, attendance_id) -> bool:
        r = self._by_id[attendance_id]
        self._by_id[attendance_id] = replace(r, check_out_time=None, work_hours=None, check_out_undone=True)
        return True

    def delete(self, *, attendance_id) -> bool:
        return self._by_id.pop(attendance_id, None) is not None

    def _matching(self, employee_id, date_from, date_to, statuses=()):
        items = list(self._by_id.values())
        if employee_id is not None:
            items = [r for r in items if r.employee_id == employee_id]
        if statuses:
            items = [r for r in items if r.status in statuses]
        if date_from:
            items = [r for r in items if r.work_date >= date_from]
        if date_to:
            items = [r for r in items if r.work_date <= date_to]
        return sorted(items, key=lambda r: (r.work_date, r.attendance_id), reverse=True)

    def list_for_employee(self, employee_id, *, date_from=None, date_to=None, offset=0, limit=10):
        return self._matching(employee_id, date_from, date_to)[offset : offset + limit]

    def count_for_employee(self, employee_id, *, date_from=None, date_to=None) -> int:
        return len(self._matching(employee_id, date_from, date_to))

    def list_all(self, *, employee_id=None, statuses=(), date_from=None, date_to=None, offset=0, limit=20):
        return self._matching(employee_id, date_from, date_to, statuses)[offset : offset + limit]

    def count_all(self, *, employee_id=None, statuses=(), date_from=None, date_to=None) -> int:
        return len(self._matching(employee_id, date_from, date_to, statuses))

    def all(self) -> list[AttendanceRecord]:
        return list(self._by_id.values())


class InMemorySalesStore:
    """Implements both the assignment and the sale repository over one snapshot-able store."""

    def __init__(self):
        self.assignments: dict[int, Assignment] = {}
        self.sales: dict[int, Sale] = {}
        self._next_id = 0

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @contextmanager
    def atomic(self):
        snapshot = (copy.copy(self.assignments), copy.copy(self.sales), self._next_id)
        try:
            yield
        except Exception:
            self.assignments, self.sales, self._next_id = snapshot
            raise

    # assignments
    def has_any(self, employee_id, product_id) -> bool:
        return any(a.employee_id == employee_id and a.product_id == product_id for a in self.assignments.values())

    def get_for_day(self, employee_id, product_id, day, *, for_update=False):
        for a in self.assignments.values():
            if a.employee_id == employee_id and a.product_id == product_id and a.assigned_at == day:
                return a
        return None

    def upsert(self, *, employee_id, product_id, day, quantity) -> int:
        existing = self.get_for_day(employee_id, product_id, day)
        if existing:
            self.assignments[existing.assignment_id] = replace(existing, quantity=quantity)
            return existing.assignment_id
        aid = self._new_id()
        self.assignments[aid] = Assignment(
            assignment_id=aid, employee_id=employee_id, product_id=product_id, quantity=quantity, assigned_at=day
        )
        return aid

    def update_reconciliation(self, *, assignment_id, status, expired_quantity) -> bool:
        a = self.assignments[assignment_id]
        self.assignments[assignment_id] = replace(a, status=status, expired_quantity=expired_quantity)
        return True

    def list_open_for_day(self, day):
        return [
            a
            for a in self.assignments.values()
            if a.assigned_at == day and a.status in (AssignmentStatus.ASSIGNED, AssignmentStatus.PARTIALLY_SOLD)
        ]

    def _filter_assignments(self, employee_id=None, product_id=None, date_from=None, date_to=None):
        items = list(self.assignments.values())
        if employee_id is not None:
            items = [a for a in items if a.employee_id == employee_id]
        if product_id is not None:
            items = [a for a in items if a.product_id == product_id]
        if date_from is not None:
            items = [a for a in items if a.assigned_at >= date_from]
        if date_to is not None:
            items = [a for a in items if a.assigned_at <= date_to]
        return sorted(items, key=lambda a: (a.assigned_at, a.assignment_id), reverse=True)

    def list(self, *, employee_id=None, product_id=None, date_from=None, date_to=None, offset=0, limit=50):
        return self._filter_assignments(employee_id, product_id, date_from, date_to)[offset : offset + limit]

    def count(self, *, employee_id=None, product_id=None, date_from=None, date_to=None) -> int:
        return len(self._filter_assignments(employee_id, product_id, date_from, date_to))

    # sales
    def sale_for_day(self, employee_id, product_id, sale_date):
        for s in self.sales.values():
            if s.employee_id == employee_id and s.product_id == product_id and s.sale_date == sale_date:
                return s
        return None

    def upsert_for_day(
        self, *, employee_id, product_id, sale_date, employee_product_id, quantity, amount, sold_at, notes=None
    ) -> int:
        existing = self.sale_for_day(employee_id, product_id, sale_date)
        if existing:
            self.sales[existing.sale_id] = replace(
                existing,
                employee_product_id=employee_product_id,
                quantity=quantity,
                amount=amount,
                sold_at=sold_at,
                notes=notes,
            )
            return existing.sale_id
        sid = self._new_id()
        self.sales[sid] = Sale(
            sale_id=sid,
            employee_id=employee_id,
            product_id=product_id,
            employee_product_id=employee_product_id,
            quantity=quantity,
            amount=Decimal(amount),
            sale_date=sale_date,
            sold_at=sold_at,
            notes=notes,
        )
        return sid

    def sum_quantity_for_day(self, employee_id, product_id, sale_date) -> int:
        return sum(
            s.quantity
            for s in self.sales.values()
            if s.employee_id == employee_id and s.product_id == product_id and s.sale_date == sale_date
        )

    def list_for_employee(self, employee_id, *, offset=0, limit=10):
        items = sorted(
            (s for s in self.sales.values() if s.employee_id == employee_id),
            key=lambda s: (s.sale_date, s.sale_id),
            reverse=True,
        )
        return items[offset : offset + limit]

    def count_for_employee(self, employee_id) -> int:
        return sum(1 for s in self.sales.values() if s.employee_id == employee_id)


class SaleRepositoryView:
    """Sale-repository face of InMemorySalesStore (get_for_day differs between the two protocols)."""

    def __init__(self, store: InMemorySalesStore):
        self._store = store

    def get_for_day(self, employee_id, product_id, sale_date):
        return self._store.sale_for_day(employee_id, product_id, sale_date)

    def __getattr__(self, name):
        return getattr(self._store, name)


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def notify(self, *, target, type, message, meta=None) -> None:
        if self.fail:
            raise RuntimeError("notification transport down")
        self.sent.append({"target": target, "type": type, "message": message, "meta": dict(meta or {})})

    def types(self) -> list[str]:
        return [n["type"] for n in self.sent]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 4, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(current=fixed_now, tz=timezone.utc)


@pytest.fixture
def window_settings() -> InMemorySettings:
    # Window 08:00-10:00, late after 08:00 + 5 minutes.
    return InMemorySettings(
        AttendanceSettings(
            work_start_time=time(8, 0),
            work_end_time=time(17, 0),
            late_threshold_minutes=5,
            check_in_window_start=time(8, 0),
            check_in_window_end=time(10, 0),
        )
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def attendance_service(attendance_repo, window_settings, clock, notifier) -> AttendanceService:
    return AttendanceService(attendance_repo, window_settings, clock, notifier=notifier)


@pytest.fixture
def sales_store() -> InMemorySalesStore:
    return InMemorySalesStore()


@pytest.fixture
def sales_service(sales_store, clock, notifier) -> SalesService:
    return SalesService(sales_store, SaleRepositoryView(sales_store), clock, notifier=notifier)


@pytest.fixture
def make_record():
    def _make(**overrides) -> AttendanceRecord:
        values = dict(
            attendance_id=1,
            employee_id=7,
            work_date=date(2026, 2, 2),
            check_in_time=None,
            check_out_time=None,
            status=AttendanceStatus.ABSENT,
        )
        values.update(overrides)
        return AttendanceRecord(**values)

    return _make


@pytest.fixture
def default_settings() -> InMemorySettings:
    return InMemorySettings(AttendanceSettings())


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture
def make_sales_service(sales_store, notifier):
    def _make(clock, *, notifier=notifier) -> SalesService:
        return SalesService(sales_store, SaleRepositoryView(sales_store), clock, notifier=notifier)

    return _make
