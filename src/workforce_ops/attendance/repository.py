from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def atomic(self) -> ContextManager:
        """Transaction scope for a read-modify-write."""

        raise NotImplementedError

    def get_for_employee_and_date(
        self, employee_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        """Raises DuplicateKeyError when (employee_id, work_date) already exists."""

        raise NotImplementedError

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        work_hours: Decimal,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def revoke_checkout(self, *, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete(self, *, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def list_all(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Sequence[AttendanceStatus] = (),
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[AttendanceRecord]:
        """Records across employees, newest day first."""

        raise NotImplementedError

    def count_all(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Sequence[AttendanceStatus] = (),
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError
