"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    AWAITING_RETURN = "awaiting_return"
    RETURNED = "returned"


# Orders in these states can no longer be cancelled by the customer
NON_CANCELLABLE_STATUSES = frozenset(
    {
        OrderStatus.SHIPPED,
        OrderStatus.COMPLETED,
        OrderStatus.RETURNED,
        OrderStatus.CANCELLED,
        OrderStatus.AWAITING_RETURN,
    }
)

RETURNABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.COMPLETED})


class ReturnStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
