from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.clock import Clock, SystemClock
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_dispatcher import MySQLNotificationDispatcher
from .sales.mysql_sales_repository import MySQLAssignmentRepository, MySQLSaleRepository
from .sales.service import SalesService
from .settings.mysql_settings_repository import MySQLAttendanceSettingsRepository
from .settings.service import AttendanceSettingsService


@dataclass(frozen=True)
class Container:
    clock: Clock
    attendance_service: AttendanceService
    sales_service: SalesService
    settings_service: AttendanceSettingsService
    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict, timezone: Optional[str] = None, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    clock = clock or SystemClock.from_name(timezone)

    settings_repo = MySQLAttendanceSettingsRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    assignments_repo = MySQLAssignmentRepository(conn)
    sales_repo = MySQLSaleRepository(conn)
    notifier = MySQLNotificationDispatcher(conn, clock)

    return Container(
        clock=clock,
        attendance_service=AttendanceService(attendance_repo, settings_repo, clock, notifier=notifier),
        sales_service=SalesService(assignments_repo, sales_repo, clock, notifier=notifier),
        settings_service=AttendanceSettingsService(settings_repo),
        conn=conn,
    )
