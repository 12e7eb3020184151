"""Payments service routers package."""

from services.payments_service.routers.checkout import router as checkout_router
from services.payments_service.routers.webhooks import router as webhooks_router

__all__ = [
    "checkout_router",
    "webhooks_router",
]
