from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from .model import NotificationTarget

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def notify(
        self,
        *,
        target: NotificationTarget,
        type: str,
        message: str,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


def notify_safely(
    dispatcher: Optional[NotificationDispatcher],
    *,
    target: NotificationTarget,
    type: str,
    message: str,
    meta: Optional[Mapping[str, Any]] = None,
) -> bool:
    """Fire-and-forget: a failing dispatcher is logged, never raised to the caller."""
    if dispatcher is None:
        return False
    try:
        dispatcher.notify(target=target, type=type, message=message, meta=meta)
        return True
    except Exception:
        logger.exception("Failed to dispatch %s notification to %s", type, target)
        return False
