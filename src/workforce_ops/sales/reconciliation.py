from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AssignmentStatus


@dataclass(frozen=True)
class Reconciliation:
    status: AssignmentStatus
    expired_quantity: int


def reconcile(assigned_quantity: int, sold_quantity: int) -> Reconciliation:
    """Derive an assignment's status from the units actually sold.

    Always computed from the summed sales, never adjusted incrementally.
    """
    if sold_quantity == 0:
        status = AssignmentStatus.EXPIRED
    elif sold_quantity < assigned_quantity:
        status = AssignmentStatus.PARTIALLY_SOLD
    else:
        status = AssignmentStatus.SOLD
    return Reconciliation(status=status, expired_quantity=max(0, assigned_quantity - sold_quantity))
