from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, ContextManager, Optional, Sequence

from ..common.datetime_utils import to_naive_utc
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateKeyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, is_lock_conflict, transaction
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT attendance_id, employee_id, work_date, check_in_time, check_out_time,
           check_in_undone, check_out_undone, status, work_hours, notes
    FROM attendance_records
"""


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return value.replace(tzinfo=timezone.utc) if value is not None else None


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=_utc(r.get("check_in_time")),
        check_out_time=_utc(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        check_in_undone=bool(r.get("check_in_undone")),
        check_out_undone=bool(r.get("check_out_undone")),
        work_hours=Decimal(str(r["work_hours"])) if r.get("work_hours") is not None else None,
        notes=r.get("notes"),
    )


def _range_clause(
    employee_id: Optional[int],
    date_from: Optional[date],
    date_to: Optional[date],
    statuses: Sequence[AttendanceStatus] = (),
) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if employee_id is not None:
        clauses.append("employee_id=%s")
        params.append(int(employee_id))
    if statuses:
        placeholders = ", ".join(["%s"] * len(statuses))
        clauses.append(f"status IN ({placeholders})")
        params.extend(AttendanceStatus(s).value for s in statuses)
    if date_from is not None:
        clauses.append("work_date >= %s")
        params.append(date_from)
    if date_to is not None:
        clauses.append("work_date <= %s")
        params.append(date_to)
    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def atomic(self) -> ContextManager:
        return transaction(self._conn_factory)

    def get_for_employee_and_date(
        self, employee_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE employee_id=%s AND work_date=%s{lock}",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, check_in_time, status, notes)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), work_date, to_naive_utc(check_in_time), status.value, notes),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                raise DuplicateKeyError(f"attendance ({employee_id}, {work_date}) already exists") from exc
            if is_lock_conflict(exc):
                # Two check-ins holding the same gap lock; InnoDB rolled this one back.
                raise DuplicateKeyError(f"attendance ({employee_id}, {work_date}) is being created concurrently") from exc
            raise

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_undone=0, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (to_naive_utc(check_in_time), status.value, notes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        work_hours: Decimal,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, work_hours=%s, notes=%s, check_out_undone=0
                WHERE attendance_id=%s
                """,
                (to_naive_utc(check_out_time), work_hours, notes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def revoke_checkout(self, *, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=NULL, work_hours=NULL, check_out_undone=1
                WHERE attendance_id=%s
                """,
                (int(attendance_id),),
            )
            return cur.rowcount > 0

    def delete(self, *, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[AttendanceRecord]:
        where, params = _range_clause(employee_id, date_from, date_to)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY work_date DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_employee(
        self,
        employee_id: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        where, params = _range_clause(employee_id, date_from, date_to)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_all(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Sequence[AttendanceStatus] = (),
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[AttendanceRecord]:
        where, params = _range_clause(employee_id, date_from, date_to, statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY work_date DESC, attendance_id DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_all(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Sequence[AttendanceStatus] = (),
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        where, params = _range_clause(employee_id, date_from, date_to, statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
