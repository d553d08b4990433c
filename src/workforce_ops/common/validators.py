from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

_HHMM = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is required and must be a number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required and must be a number") from None
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be a whole number")
    return number


def require_positive_int(value: Any, field_name: str) -> int:
    number = require_int(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} is required and must be a positive number")
    return number


def require_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is required and must be a number")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} is required and must be a number") from None


def require_hhmm(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not _HHMM.match(value.strip()):
        raise ValidationError(f"Invalid time format for {field_name}. Use HH:MM format (e.g., 09:00)")
    return value.strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def page_params(page: Any, page_size: Any, *, default_size: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    page_n = require_int(page if page not in (None, "") else DEFAULT_PAGE, "page")
    size_n = require_int(page_size if page_size not in (None, "") else default_size, "page_size")
    if page_n < 1:
        raise ValidationError("page must be at least 1")
    if size_n < 1 or size_n > MAX_PAGE_SIZE:
        raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    return page_n, size_n
