from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, time, timedelta
from typing import Any

from ..common.datetime_utils import format_hhmm


@dataclass(frozen=True)
class AttendanceSettings:
    """Administratively configured attendance times (singleton row)."""

    work_start_time: time = time(9, 0)
    work_end_time: time = time(17, 0)
    late_threshold_minutes: int = 15
    grace_period_minutes: int = 5
    check_in_window_start: time = time(7, 0)
    check_in_window_end: time = time(20, 0)
    check_out_window_start: time = time(16, 0)
    check_out_window_end: time = time(23, 59)
    auto_mark_absent: bool = True
    weekend_work_enabled: bool = False
    holiday_work_enabled: bool = False

    def allows_check_in_at(self, wall_time: time) -> bool:
        """Inclusive on both ends, compared at minute granularity."""
        return self.check_in_window_start <= wall_time <= self.check_in_window_end

    def late_cutoff(self) -> time:
        """Latest wall time still counted as on time."""
        anchor = datetime.combine(datetime.min.date(), self.work_start_time)
        return (anchor + timedelta(minutes=self.late_threshold_minutes)).time()

    def is_late(self, wall_time: time) -> bool:
        return wall_time > self.late_cutoff()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, time):
                data[key] = format_hhmm(value)
        return data


DEFAULT_SETTINGS = AttendanceSettings()
