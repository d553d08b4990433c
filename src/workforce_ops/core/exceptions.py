from __future__ import annotations

from datetime import date
from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Carries the identifying context (employee/product/day) so callers can act on it.
    """

    code = "domain_error"

    def __init__(
        self,
        message: str,
        *,
        employee_id: Optional[int] = None,
        product_id: Optional[int] = None,
        day: Optional[date] = None,
    ):
        super().__init__(message)
        self.message = message
        self.employee_id = employee_id
        self.product_id = product_id
        self.day = day

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.employee_id is not None:
            data["employee_id"] = self.employee_id
        if self.product_id is not None:
            data["product_id"] = self.product_id
        if self.day is not None:
            data["day"] = self.day.isoformat()
        return data


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class WindowViolation(DomainError):
    """Check-in attempted outside the configured check-in window."""

    code = "window_violation"


class InvalidTransition(DomainError):
    """The requested action is not allowed from the record's current state."""

    code = "invalid_transition"


class NotFound(DomainError):
    code = "not_found"


class NotAssigned(DomainError):
    """The product was never assigned to the employee."""

    code = "not_assigned"


class NoAssignmentToday(DomainError):
    code = "no_assignment_today"


class QuantityOutOfRange(DomainError):
    code = "quantity_out_of_range"


class DuplicateKeyError(Exception):
    """Raised by repositories when a unique key is already taken by another writer."""
