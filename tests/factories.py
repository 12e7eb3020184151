"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(stock=3)
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import User, UserRole

        defaults = {
            "id": f"user-{uuid.uuid4().hex[:8]}",
            "email": _unique_email(),
            "first_name": "Test",
            "last_name": "Customer",
            "role": UserRole.USER,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class AddressFactory:
    @staticmethod
    def create(user_id: str, **overrides):
        from services.store_service.models import Address

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "first_name": "Test",
            "last_name": "Customer",
            "street": "Calle Mayor 1",
            "city": "Madrid",
            "province": "Madrid",
            "postal_code": "28013",
            "country": "Spain",
            "phone": "+34600000000",
        }
        defaults.update(overrides)
        return Address(**defaults)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product

        defaults = {
            "id": _uuid(),
            "name": f"Sneaker {uuid.uuid4().hex[:4]}",
            "description": "Test product",
            "price": Decimal("25.00"),
            "stock": 10,
            "image_url": "sneaker.jpg",
            "size": "42",
            "color": "black",
            "sku": f"SKU-{uuid.uuid4().hex[:8].upper()}",
        }
        defaults.update(overrides)
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Orders & payments
# ---------------------------------------------------------------------------


class OrderFactory:
    @staticmethod
    def create(user_id: str, **overrides):
        from services.store_service.models import Order, OrderStatus

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "status": OrderStatus.PENDING,
            "total": Decimal("50.00"),
            "total_paid": None,
            "discount_amount": None,
            "promotion_code": None,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Order(**defaults)


class OrderItemFactory:
    @staticmethod
    def create(order_id, product, **overrides):
        from services.store_service.models import OrderItem

        defaults = {
            "id": _uuid(),
            "order_id": order_id,
            "product_id": product.id,
            "product_name": product.name,
            "quantity": 1,
            "price": product.price,
        }
        defaults.update(overrides)
        return OrderItem(**defaults)


class PaymentFactory:
    @staticmethod
    def create(order_id, **overrides):
        from services.payments_service.models import (
            Payment,
            PaymentMethod,
            PaymentStatus,
        )

        defaults = {
            "id": _uuid(),
            "order_id": order_id,
            "transaction_id": f"pi_{uuid.uuid4().hex[:16]}",
            "amount": Decimal("50.00"),
            "status": PaymentStatus.COMPLETED,
            "method": PaymentMethod.CARD,
            "discount_amount": Decimal("0.00"),
            "promotion_code": None,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Payment(**defaults)


class ReturnRequestFactory:
    @staticmethod
    def create(order_id, user_id: str, **overrides):
        from services.store_service.models import ReturnRequest, ReturnStatus

        defaults = {
            "id": _uuid(),
            "order_id": order_id,
            "user_id": user_id,
            "reason": "Wrong size",
            "total_amount": Decimal("50.00"),
            "status": ReturnStatus.PENDING,
        }
        defaults.update(overrides)
        return ReturnRequest(**defaults)


def checkout_completed_event(order_id, amount_total: int = 5000, **session_overrides) -> dict:
    """Build a Stripe ``checkout.session.completed`` envelope."""
    session = {
        "id": f"cs_test_{uuid.uuid4().hex[:12]}",
        "object": "checkout.session",
        "amount_total": amount_total,
        "payment_intent": f"pi_{uuid.uuid4().hex[:16]}",
        "metadata": {"orderId": str(order_id)},
        "total_details": {"amount_discount": 0},
    }
    session.update(session_overrides)
    return {
        "id": f"evt_{uuid.uuid4().hex[:12]}",
        "type": "checkout.session.completed",
        "data": {"object": session},
    }
