"""Payments Service models package."""

from services.payments_service.models.core import Payment
from services.payments_service.models.enums import PaymentMethod, PaymentStatus

__all__ = [
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
