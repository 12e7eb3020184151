"""Display-total reconstruction for paid orders."""

from decimal import Decimal
from typing import Optional

from libs.common.currency import to_money

# Amounts closer than this are treated as equal
TOTAL_EPSILON = Decimal("0.0001")


def reconstruct_original_total(
    total: Decimal,
    total_paid: Optional[Decimal],
    discount_amount: Optional[Decimal],
) -> Decimal:
    """Return the pre-discount total of an order.

    Capture overwrites ``total`` with the amount actually paid. When that is
    what ``total`` still holds, add the discount back; otherwise ``total`` is
    already the original amount.
    """
    if total_paid is None or discount_amount is None:
        return to_money(total)
    if abs(Decimal(total) - Decimal(total_paid)) < TOTAL_EPSILON:
        return to_money(Decimal(total_paid) + Decimal(discount_amount))
    return to_money(total)
