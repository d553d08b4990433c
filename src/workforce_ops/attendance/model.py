from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceState, AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one UTC day."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    check_in_undone: bool = False
    check_out_undone: bool = False
    work_hours: Optional[Decimal] = None
    notes: Optional[str] = None

    @property
    def state(self) -> AttendanceState:
        if self.check_in_undone:
            return AttendanceState.CHECK_IN_REVOKED
        if self.check_out_undone:
            return AttendanceState.CHECK_OUT_REVOKED
        if self.check_out_time is not None:
            return AttendanceState.CHECKED_OUT
        if self.check_in_time is not None:
            return AttendanceState.CHECKED_IN
        return AttendanceState.AWAITING_CHECK_IN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "check_in": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out": self.check_out_time.isoformat() if self.check_out_time else None,
            "check_in_undone": self.check_in_undone,
            "check_out_undone": self.check_out_undone,
            "status": self.status.value,
            "work_hours": str(self.work_hours) if self.work_hours is not None else None,
            "notes": self.notes,
            "state": self.state.value,
        }


def state_of(record: Optional[AttendanceRecord]) -> AttendanceState:
    return record.state if record is not None else AttendanceState.NO_RECORD


@dataclass(frozen=True)
class AttendancePage:
    records: Sequence[AttendanceRecord]
    total: int
    page: int
    page_size: int
