"""Unit tests for display-total reconstruction."""

from decimal import Decimal

import pytest
from services.store_service.services.totals import reconstruct_original_total


@pytest.mark.unit
def test_paid_order_adds_discount_back():
    """total=80, paid=80, discount=20 displays the pre-discount 100.00."""
    result = reconstruct_original_total(Decimal("80"), Decimal("80"), Decimal("20"))

    assert result == Decimal("100.00")


@pytest.mark.unit
def test_unpaid_order_keeps_total():
    assert reconstruct_original_total(Decimal("100"), None, None) == Decimal("100")


@pytest.mark.unit
def test_total_not_overwritten_is_already_original():
    """When total differs from total_paid the stored total is the original."""
    result = reconstruct_original_total(Decimal("100"), Decimal("80"), Decimal("20"))

    assert result == Decimal("100.00")


@pytest.mark.unit
def test_half_paid_fields_are_treated_as_unpaid():
    assert reconstruct_original_total(Decimal("45.5"), Decimal("45.5"), None) == Decimal(
        "45.50"
    )


@pytest.mark.unit
def test_rounds_to_two_decimals():
    result = reconstruct_original_total(
        Decimal("19.99"), Decimal("19.99"), Decimal("5.005")
    )

    assert result == Decimal("25.00")
