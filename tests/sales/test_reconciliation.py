import pytest

from workforce_ops.core.enums import AssignmentStatus
from workforce_ops.sales.reconciliation import reconcile


@pytest.mark.parametrize("quantity", [1, 3, 10])
def test_status_matches_sold_quantity_for_every_amount(quantity):
    for sold in range(quantity + 1):
        result = reconcile(quantity, sold)

        assert (result.status == AssignmentStatus.SOLD) == (sold == quantity)
        assert (result.status == AssignmentStatus.EXPIRED) == (sold == 0)
        assert (result.status == AssignmentStatus.PARTIALLY_SOLD) == (0 < sold < quantity)
        assert result.expired_quantity == quantity - sold


def test_expired_quantity_never_negative():
    # Assignment lowered after the sale was recorded.
    result = reconcile(3, 5)
    assert result.status == AssignmentStatus.SOLD
    assert result.expired_quantity == 0
