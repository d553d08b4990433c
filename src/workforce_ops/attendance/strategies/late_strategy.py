from __future__ import annotations

from datetime import date, datetime, time

from ...core.enums import AttendanceStatus
from ...settings.model import AttendanceSettings
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; minutes are counted from the work start time."""

    def decide_checkin(self, *, wall_time: time, settings: AttendanceSettings) -> StatusDecision:
        start = datetime.combine(date.min, settings.work_start_time)
        late = int((datetime.combine(date.min, wall_time) - start).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=max(0, late))
