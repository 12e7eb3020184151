"""Currency conversion utilities for ShopBrands.

Storage / API unit: major currency unit as ``Decimal`` with two places
(e.g. ``Decimal("19.99")`` = €19.99).
Provider unit: minor units (cents) as ``int``, the way Stripe reports amounts.

Conversion chain
----------------
Major × 100 → Minor
Minor ÷ 100 → Major
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

MINOR_PER_MAJOR: int = 100
CENT = Decimal("0.01")

Number = Union[int, float, str, Decimal]


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_money(value: Number) -> Decimal:
    """Quantize any numeric value to two decimal places (round half-up)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Number) -> int:
    """Convert a major-unit amount to cents (round half-up). €1 = 100 cents."""
    return int((Decimal(str(amount)) * MINOR_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int) -> Decimal:
    """Convert cents to a major-unit amount. 100 cents = €1."""
    return to_money(Decimal(int(minor)) / MINOR_PER_MAJOR)


def format_amount(amount: Number, currency: str = "eur") -> str:
    """Human readable amount for emails and invoices, e.g. ``€1,234.50``."""
    symbol = {"eur": "€", "usd": "$", "gbp": "£"}.get(currency.lower(), "")
    value = to_money(amount)
    if symbol:
        return f"{symbol}{value:,.2f}"
    return f"{value:,.2f} {currency.upper()}"
