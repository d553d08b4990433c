from datetime import time

import pytest

from workforce_ops.core.exceptions import ValidationError
from workforce_ops.settings.model import AttendanceSettings
from workforce_ops.settings.service import AttendanceSettingsService


@pytest.fixture
def settings_service(default_settings):
    return AttendanceSettingsService(default_settings)


def test_get_returns_stored_settings(settings_service):
    assert settings_service.get() == AttendanceSettings()


def test_partial_update_merges_over_current(settings_service, default_settings):
    updated = settings_service.update({"work_start_time": "08:30", "late_threshold_minutes": "10"})

    assert updated.work_start_time == time(8, 30)
    assert updated.late_threshold_minutes == 10
    assert updated.work_end_time == time(17, 0)
    assert default_settings.get() == updated


@pytest.mark.parametrize(
    "changes",
    [
        {"work_start_time": "8.30"},
        {"check_in_window_end": "24:00"},
        {"late_threshold_minutes": 121},
        {"late_threshold_minutes": -1},
        {"grace_period_minutes": 61},
        {"grace_period_minutes": "abc"},
        {"work_start_time": "18:00"},
        {"check_in_window_start": "20:00"},
        {"check_out_window_end": "15:00"},
    ],
)
def test_invalid_updates_are_rejected_and_not_saved(settings_service, default_settings, changes):
    with pytest.raises(ValidationError):
        settings_service.update(changes)

    assert default_settings.get() == AttendanceSettings()


def test_flags_are_coerced_to_bool(settings_service):
    updated = settings_service.update({"weekend_work_enabled": 1, "auto_mark_absent": False})

    assert updated.weekend_work_enabled is True
    assert updated.auto_mark_absent is False


def test_late_cutoff_and_window():
    settings = AttendanceSettings(work_start_time=time(8, 0), late_threshold_minutes=5)

    assert settings.late_cutoff() == time(8, 5)
    assert not settings.is_late(time(8, 5))
    assert settings.is_late(time(8, 6))
    assert settings.allows_check_in_at(time(7, 0))
    assert settings.allows_check_in_at(time(20, 0))
    assert not settings.allows_check_in_at(time(20, 1))


def test_to_dict_formats_times():
    data = AttendanceSettings().to_dict()

    assert data["work_start_time"] == "09:00"
    assert data["check_out_window_end"] == "23:59"
    assert data["late_threshold_minutes"] == 15
