from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import NotificationAudience


@dataclass(frozen=True)
class NotificationTarget:
    """Recipient of a notification: one employee, one user, or every admin."""

    audience: NotificationAudience
    employee_id: Optional[int] = None
    user_id: Optional[str] = None

    @classmethod
    def admins(cls) -> "NotificationTarget":
        return cls(audience=NotificationAudience.ADMIN)

    @classmethod
    def employee(cls, employee_id: int) -> "NotificationTarget":
        return cls(audience=NotificationAudience.EMPLOYEE, employee_id=int(employee_id))

    @classmethod
    def user(cls, user_id: str) -> "NotificationTarget":
        return cls(audience=NotificationAudience.USER, user_id=str(user_id))
