"""Store Service models package."""

from services.store_service.models.catalog import Address, Product, User
from services.store_service.models.commerce import (
    Cart,
    CartItem,
    Order,
    OrderItem,
    ReturnRequest,
)
from services.store_service.models.enums import (
    NON_CANCELLABLE_STATUSES,
    RETURNABLE_STATUSES,
    OrderStatus,
    ReturnStatus,
    UserRole,
)

__all__ = [
    "Address",
    "Cart",
    "CartItem",
    "NON_CANCELLABLE_STATUSES",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "RETURNABLE_STATUSES",
    "ReturnRequest",
    "ReturnStatus",
    "User",
    "UserRole",
]
