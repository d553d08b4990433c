from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..common.clock import Clock
from ..common.datetime_utils import ensure_aware, local_wall_time, utc_day_bucket
from ..common.validators import optional_text, page_params
from ..core.constants import DEFAULT_ADMIN_ATTENDANCE_PAGE_SIZE
from ..core.enums import AttendanceAction, AttendanceState, AttendanceStatus
from ..core.exceptions import DuplicateKeyError, InvalidTransition, NotFound, ValidationError, WindowViolation
from ..notifications.dispatcher import NotificationDispatcher, notify_safely
from ..notifications.model import NotificationTarget
from ..settings.repository import AttendanceSettingsProvider
from .factory import AttendanceStrategyFactory
from .model import AttendancePage, AttendanceRecord, state_of
from .repository import AttendanceRepository
from .transitions import transition

logger = logging.getLogger(__name__)

_HOURS = Decimal("0.01")


def compute_work_hours(check_in: datetime, check_out: datetime) -> Decimal:
    seconds = Decimal(str((check_out - check_in).total_seconds()))
    return (seconds / Decimal(3600)).quantize(_HOURS, rounding=ROUND_HALF_UP)


class AttendanceService:
    """Per-employee, per-UTC-day check-in/check-out lifecycle."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        settings: AttendanceSettingsProvider,
        clock: Clock,
        *,
        notifier: Optional[NotificationDispatcher] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._settings = settings
        self._clock = clock
        self._notifier = notifier
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def check_in(
        self,
        employee_id: int,
        *,
        date: Optional[datetime] = None,
        check_in: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        now = self._clock.now()
        reference = ensure_aware(date) if date else now
        check_in_time = ensure_aware(check_in) if check_in else now
        work_date = utc_day_bucket(reference)
        notes = optional_text(notes)

        settings = self._settings.get()
        if not settings.allows_check_in_at(local_wall_time(reference, self._clock.tz)):
            logger.warning("Check-in outside window for employee %s at %s", employee_id, reference.isoformat())
            raise WindowViolation(
                f"Check-in only allowed between {settings.check_in_window_start:%H:%M} "
                f"and {settings.check_in_window_end:%H:%M}",
                employee_id=employee_id,
                day=work_date,
            )

        wall_time = local_wall_time(check_in_time, self._clock.tz)
        strategy = self._factory.for_checkin(wall_time=wall_time, settings=settings)
        decision = strategy.decide_checkin(wall_time=wall_time, settings=settings)

        with self._attendance.atomic():
            existing = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            transition(state_of(existing), AttendanceAction.CHECK_IN, employee_id=employee_id, day=work_date)

            if existing is None:
                try:
                    self._attendance.create_checkin(
                        employee_id=employee_id,
                        work_date=work_date,
                        check_in_time=check_in_time,
                        status=decision.status,
                        notes=notes,
                    )
                except DuplicateKeyError:
                    # A concurrent check-in won the unique key.
                    raise InvalidTransition(
                        "Check-in not allowed (already checked in or undo used)",
                        employee_id=employee_id,
                        day=work_date,
                    ) from None
            else:
                self._attendance.update_checkin(
                    attendance_id=existing.attendance_id,
                    check_in_time=check_in_time,
                    status=decision.status,
                    notes=notes,
                )
            record = self._require(employee_id, work_date)

        logger.info(
            "Employee %s checked in for %s (%s, %d min late)",
            employee_id,
            work_date,
            decision.status.value,
            decision.late_minutes,
        )
        notify_safely(
            self._notifier,
            target=NotificationTarget.admins(),
            type="employee_attendance_checkin",
            message=(
                f"Employee {employee_id} checked in at {wall_time:%H:%M} on {work_date.isoformat()} "
                f"(Status: {decision.status.value})."
            ),
            meta={"employee_id": employee_id, "attendance_id": record.attendance_id},
        )
        return record

    def undo_check_in(self, employee_id: int, *, date: Optional[datetime] = None) -> None:
        """Deletes the record for the day of `date` (default today); check-in can then be retried."""
        work_date = utc_day_bucket(ensure_aware(date) if date else self._clock.now())

        with self._attendance.atomic():
            record = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            transition(state_of(record), AttendanceAction.UNDO_CHECK_IN, employee_id=employee_id, day=work_date)
            self._attendance.delete(attendance_id=record.attendance_id)

        logger.info("Employee %s undid check-in for %s", employee_id, work_date)
        notify_safely(
            self._notifier,
            target=NotificationTarget.admins(),
            type="employee_attendance_checkin_undone",
            message=f"Employee {employee_id} has undone their check-in for {work_date.isoformat()}.",
            meta={"employee_id": employee_id},
        )

    def check_out(
        self,
        employee_id: int,
        *,
        check_out: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        now = self._clock.now()
        work_date = utc_day_bucket(now)
        check_out_time = ensure_aware(check_out) if check_out else now

        with self._attendance.atomic():
            record = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if record is None:
                raise NotFound("No check-in found for today", employee_id=employee_id, day=work_date)
            transition(record.state, AttendanceAction.CHECK_OUT, employee_id=employee_id, day=work_date)

            if check_out_time < record.check_in_time:
                raise ValidationError("Check-out cannot be earlier than check-in", employee_id=employee_id, day=work_date)
            work_hours = compute_work_hours(record.check_in_time, check_out_time)

            self._attendance.update_checkout(
                attendance_id=record.attendance_id,
                check_out_time=check_out_time,
                work_hours=work_hours,
                notes=optional_text(notes) or record.notes,
            )
            record = self._require(employee_id, work_date)

        logger.info("Employee %s checked out for %s after %s hours", employee_id, work_date, work_hours)
        notify_safely(
            self._notifier,
            target=NotificationTarget.admins(),
            type="employee_attendance_checkout",
            message=(
                f"Employee {employee_id} checked out at {local_wall_time(check_out_time, self._clock.tz):%H:%M} "
                f"on {work_date.isoformat()} (Worked {work_hours} hours)."
            ),
            meta={"employee_id": employee_id, "attendance_id": record.attendance_id},
        )
        notify_safely(
            self._notifier,
            target=NotificationTarget.employee(employee_id),
            type="employee_attendance_updated",
            message=f"Your attendance record for {work_date.isoformat()} was updated.",
            meta={"attendance_id": record.attendance_id},
        )
        return record

    def undo_check_out(self, employee_id: int) -> AttendanceRecord:
        """One-shot: the revoked state admits no further check-out that day."""
        work_date = utc_day_bucket(self._clock.now())

        with self._attendance.atomic():
            record = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if record is None:
                raise NotFound("No check-in found for today", employee_id=employee_id, day=work_date)
            transition(record.state, AttendanceAction.UNDO_CHECK_OUT, employee_id=employee_id, day=work_date)
            self._attendance.revoke_checkout(attendance_id=record.attendance_id)
            record = self._require(employee_id, work_date)

        logger.info("Employee %s undid check-out for %s", employee_id, work_date)
        notify_safely(
            self._notifier,
            target=NotificationTarget.admins(),
            type="employee_attendance_checkout_undone",
            message=f"Employee {employee_id} has undone their check-out for {work_date.isoformat()}.",
            meta={"employee_id": employee_id, "attendance_id": record.attendance_id},
        )
        return record

    def today_state(self, employee_id: int) -> AttendanceState:
        work_date = utc_day_bucket(self._clock.now())
        return state_of(self._attendance.get_for_employee_and_date(employee_id, work_date))

    def list_attendance(
        self,
        employee_id: int,
        *,
        page: int = 1,
        page_size: int = 10,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AttendancePage:
        page, page_size = page_params(page, page_size)
        if date_from and date_to and date_from > date_to:
            raise ValidationError("from must not be after to", employee_id=employee_id)

        total = self._attendance.count_for_employee(employee_id, date_from=date_from, date_to=date_to)
        records = self._attendance.list_for_employee(
            employee_id,
            date_from=date_from,
            date_to=date_to,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return AttendancePage(records=list(records), total=total, page=page, page_size=page_size)

    def list_all_attendance(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Sequence[str] = (),
        page: int = 1,
        page_size: int = DEFAULT_ADMIN_ATTENDANCE_PAGE_SIZE,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AttendancePage:
        """Admin view across employees, optionally narrowed to one employee and to some statuses."""
        page, page_size = page_params(page, page_size, default_size=DEFAULT_ADMIN_ATTENDANCE_PAGE_SIZE)
        if date_from and date_to and date_from > date_to:
            raise ValidationError("from must not be after to", employee_id=employee_id)
        try:
            wanted = tuple(AttendanceStatus(s) for s in statuses)
        except ValueError:
            allowed = ", ".join(s.value for s in AttendanceStatus)
            raise ValidationError(f"status must be one of {allowed}") from None

        filters = dict(employee_id=employee_id, statuses=wanted, date_from=date_from, date_to=date_to)
        total = self._attendance.count_all(**filters)
        records = self._attendance.list_all(**filters, offset=(page - 1) * page_size, limit=page_size)
        return AttendancePage(records=list(records), total=total, page=page, page_size=page_size)

    def _require(self, employee_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, work_date)
        if record is None:
            raise NotFound("Attendance record disappeared", employee_id=employee_id, day=work_date)
        return record
