from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..settings.model import AttendanceSettings
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the status strategy from the configured late cutoff."""

    def for_checkin(self, *, wall_time: time, settings: AttendanceSettings) -> AttendanceStrategy:
        if settings.is_late(wall_time):
            return LateStrategy()
        return PresentStrategy()
