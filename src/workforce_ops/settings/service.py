from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_hhmm, require_int
from ..core.constants import MAX_GRACE_PERIOD_MINUTES, MAX_LATE_THRESHOLD_MINUTES
from ..core.exceptions import ValidationError
from .model import AttendanceSettings
from .repository import AttendanceSettingsRepository

logger = logging.getLogger(__name__)

_TIME_FIELDS = (
    "work_start_time",
    "work_end_time",
    "check_in_window_start",
    "check_in_window_end",
    "check_out_window_start",
    "check_out_window_end",
)
_BOOL_FIELDS = ("auto_mark_absent", "weekend_work_enabled", "holiday_work_enabled")

_ORDERED_PAIRS = (
    ("work_start_time", "work_end_time", "Work end time must be after work start time"),
    ("check_in_window_start", "check_in_window_end", "Check-in window end must be after check-in window start"),
    ("check_out_window_start", "check_out_window_end", "Check-out window end must be after check-out window start"),
)


class AttendanceSettingsService:
    def __init__(self, settings: AttendanceSettingsRepository):
        self._settings = settings

    def get(self) -> AttendanceSettings:
        return self._settings.get()

    def update(self, changes: Mapping[str, Any]) -> AttendanceSettings:
        """Validate a partial update, merge it over the stored settings and persist."""
        values: dict[str, Any] = {}

        for name in _TIME_FIELDS:
            if changes.get(name):
                values[name] = parse_hhmm(require_hhmm(changes[name], name))

        if changes.get("late_threshold_minutes") is not None:
            late = require_int(changes["late_threshold_minutes"], "late_threshold_minutes")
            if late < 0 or late > MAX_LATE_THRESHOLD_MINUTES:
                raise ValidationError(f"Late threshold must be between 0 and {MAX_LATE_THRESHOLD_MINUTES} minutes")
            values["late_threshold_minutes"] = late

        if changes.get("grace_period_minutes") is not None:
            grace = require_int(changes["grace_period_minutes"], "grace_period_minutes")
            if grace < 0 or grace > MAX_GRACE_PERIOD_MINUTES:
                raise ValidationError(f"Grace period must be between 0 and {MAX_GRACE_PERIOD_MINUTES} minutes")
            values["grace_period_minutes"] = grace

        for name in _BOOL_FIELDS:
            if changes.get(name) is not None:
                values[name] = bool(changes[name])

        merged = dataclasses.replace(self._settings.get(), **values)
        for start, end, message in _ORDERED_PAIRS:
            if getattr(merged, start) >= getattr(merged, end):
                raise ValidationError(message)

        self._settings.save(merged)
        logger.info("Attendance settings updated: %s", sorted(values))
        return merged
