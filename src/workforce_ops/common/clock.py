from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

_LOCALTIME = Path("/etc/localtime")


class Clock(Protocol):
    tz: tzinfo

    def now(self) -> datetime:
        raise NotImplementedError


def local_zone() -> tzinfo:
    """The host's zone as a full ZoneInfo (DST rules included), not a frozen offset.

    Resolution order: TZ environment variable, /etc/localtime, then UTC.
    """
    name = os.getenv("TZ", "").lstrip(":")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("TZ=%s is not a known zone; falling back to /etc/localtime", name)

    if _LOCALTIME.exists():
        with _LOCALTIME.open("rb") as fh:
            return ZoneInfo.from_file(fh, key="localtime")

    logger.warning("Could not resolve the local timezone; using UTC")
    return timezone.utc


class SystemClock:
    """Wall clock in the server timezone.

    Note: Injected everywhere "now" is needed so tests can pin the instant.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or local_zone()

    @classmethod
    def from_name(cls, name: Optional[str]) -> "SystemClock":
        return cls(ZoneInfo(name) if name else None)

    def now(self) -> datetime:
        return datetime.now(self.tz)


@dataclass
class FixedClock:
    current: datetime
    tz: tzinfo = timezone.utc

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)
