from __future__ import annotations

from typing import Protocol

from .model import AttendanceSettings


class AttendanceSettingsProvider(Protocol):
    def get(self) -> AttendanceSettings:
        raise NotImplementedError


class AttendanceSettingsRepository(AttendanceSettingsProvider, Protocol):
    def save(self, settings: AttendanceSettings) -> None:
        raise NotImplementedError
