from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    DomainError,
    InvalidTransition,
    NoAssignmentToday,
    NotAssigned,
    NotFound,
    QuantityOutOfRange,
    ValidationError,
    WindowViolation,
)
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    ValidationError: 400,
    WindowViolation: 403,
    InvalidTransition: 403,
    NotFound: 404,
    NotAssigned: 403,
    NoAssignmentToday: 400,
    QuantityOutOfRange: 400,
}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify(exc.to_dict()), status_for(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error", "code": "internal_error"}), 500


def employee_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("employee_id") is None:
            return jsonify({"error": "Unauthorized", "code": "unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session and "employee_id" not in session:
            return jsonify({"error": "Unauthorized", "code": "unauthorized"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"error": "Forbidden", "code": "forbidden"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_employee_id() -> int:
    return int(session["employee_id"])


def json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Invalid request. Please contact support if this continues.")
    return data


def optional_date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)") from None


def optional_int_arg(name: str) -> Optional[int]:
    value = request.args.get(name)
    if not value:
        return None
    if not value.isdigit():
        raise ValidationError(f"{name} must be a number")
    return int(value)


def optional_datetime(data: dict, name: str) -> Optional[datetime]:
    value = data.get(name)
    if not value:
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp") from None


def json_object() -> dict:
    data = json_body()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
