from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..common.clock import Clock
from ..common.datetime_utils import to_naive_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .dispatcher import NotificationDispatcher
from .model import NotificationTarget


class MySQLNotificationDispatcher(NotificationDispatcher):
    """Writes notifications to the outbox table; delivery happens elsewhere."""

    def __init__(self, conn_factory: DatabaseConnection, clock: Clock):
        self._conn_factory = conn_factory
        self._clock = clock

    def notify(
        self,
        *,
        target: NotificationTarget,
        type: str,
        message: str,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(audience, user_id, employee_id, type, message, meta, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    target.audience.value,
                    target.user_id,
                    target.employee_id,
                    type,
                    message,
                    json.dumps(dict(meta or {}), default=str),
                    to_naive_utc(self._clock.now()),
                ),
            )
