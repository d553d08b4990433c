from __future__ import annotations

import logging

import mysql.connector

from ..core.constants import SETTINGS_SINGLETON_ID
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import DEFAULT_SETTINGS, AttendanceSettings
from .repository import AttendanceSettingsRepository

logger = logging.getLogger(__name__)

_COLUMNS = (
    "work_start_time",
    "work_end_time",
    "late_threshold_minutes",
    "grace_period_minutes",
    "check_in_window_start",
    "check_in_window_end",
    "check_out_window_start",
    "check_out_window_end",
    "auto_mark_absent",
    "weekend_work_enabled",
    "holiday_work_enabled",
)


class MySQLAttendanceSettingsRepository(AttendanceSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> AttendanceSettings:
        """Read the singleton row, creating it with column defaults on first use.

        Falls back to built-in defaults when the database is unreachable.
        """
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT IGNORE INTO attendance_settings(settings_id) VALUES(%s)", (SETTINGS_SINGLETON_ID,))
                cur.execute(
                    f"SELECT {', '.join(_COLUMNS)} FROM attendance_settings WHERE settings_id=%s",
                    (SETTINGS_SINGLETON_ID,),
                )
                r = fetchone(cur)
        except mysql.connector.Error:
            logger.exception("Error fetching attendance settings; using defaults")
            return DEFAULT_SETTINGS

        if not r:
            return DEFAULT_SETTINGS
        return AttendanceSettings(
            work_start_time=normalize_mysql_time(r["work_start_time"]),
            work_end_time=normalize_mysql_time(r["work_end_time"]),
            late_threshold_minutes=int(r["late_threshold_minutes"]),
            grace_period_minutes=int(r["grace_period_minutes"]),
            check_in_window_start=normalize_mysql_time(r["check_in_window_start"]),
            check_in_window_end=normalize_mysql_time(r["check_in_window_end"]),
            check_out_window_start=normalize_mysql_time(r["check_out_window_start"]),
            check_out_window_end=normalize_mysql_time(r["check_out_window_end"]),
            auto_mark_absent=bool(r["auto_mark_absent"]),
            weekend_work_enabled=bool(r["weekend_work_enabled"]),
            holiday_work_enabled=bool(r["holiday_work_enabled"]),
        )

    def save(self, settings: AttendanceSettings) -> None:
        values = tuple(getattr(settings, c) for c in _COLUMNS)
        assignments = ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_settings(settings_id, {', '.join(_COLUMNS)})
                VALUES(%s, {', '.join(['%s'] * len(_COLUMNS))})
                ON DUPLICATE KEY UPDATE {assignments}
                """,
                (SETTINGS_SINGLETON_ID, *values),
            )
