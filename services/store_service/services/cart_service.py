"""Cart aggregation and checkout."""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import to_money
from libs.common.errors import NotFoundError, StockError, ValidationError
from libs.common.logging import get_logger
from libs.common.notifications import fire_and_forget
from libs.db.session import commit_or_raise
from services.store_service.models import (
    Address,
    Cart,
    CartItem,
    Order,
    OrderItem,
    OrderStatus,
)
from services.store_service.services.stock_ledger import StockLedger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive whole number")
    return quantity


def public_image_url(image_url: Optional[str]) -> Optional[str]:
    if not image_url:
        return None
    if image_url.startswith(("http://", "https://")):
        return image_url
    base = get_settings().PUBLIC_BASE_URL.rstrip("/")
    return f"{base}/uploads/{image_url.lstrip('/')}"


class CartService:
    """Per-user cart operations.

    ``payments`` creates hosted checkout sessions and ``notifier`` receives
    the new-order admin alert; both are only needed by ``checkout``.
    """

    def __init__(self, db: AsyncSession, payments=None, notifier=None):
        self.db = db
        self.payments = payments
        self.notifier = notifier
        self.stock = StockLedger(db)

    async def _find_cart(self, user_id: str) -> Optional[Cart]:
        result = await self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id)
            .options(selectinload(Cart.items).selectinload(CartItem.product))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_create_cart(self, user_id: str) -> Cart:
        cart = await self._find_cart(user_id)
        if cart:
            return cart
        cart = Cart(user_id=user_id)
        self.db.add(cart)
        await commit_or_raise(self.db, "create cart")
        logger.info("Created cart %s for user %s", cart.id, user_id)
        return await self._find_cart(user_id)

    async def _owned_item(self, user_id: str, item_id: uuid.UUID) -> CartItem:
        result = await self.db.execute(
            select(CartItem)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(CartItem.id == item_id, Cart.user_id == user_id)
            .options(selectinload(CartItem.product))
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError("Cart item not found")
        return item

    async def add_item(self, user_id: str, product_id: uuid.UUID, quantity: int) -> dict:
        """Add ``quantity`` units; an existing line is increased, never duplicated."""
        _validate_quantity(quantity)
        product = await self.stock.get_product(product_id)
        cart = await self.get_or_create_cart(user_id)

        existing = next((i for i in cart.items if i.product_id == product_id), None)
        combined = quantity + (existing.quantity if existing else 0)
        if combined > product.stock:
            raise StockError(
                f"Only {product.stock} units of {product.name} available",
                product_id=product_id,
            )

        if existing:
            existing.quantity = combined
        else:
            self.db.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity))
        await commit_or_raise(self.db, "add item to cart")
        return await self.get_cart(user_id)

    async def update_item(self, user_id: str, item_id: uuid.UUID, quantity: int) -> dict:
        _validate_quantity(quantity)
        item = await self._owned_item(user_id, item_id)
        if quantity > item.product.stock:
            raise StockError(
                f"Only {item.product.stock} units of {item.product.name} available",
                product_id=item.product_id,
            )
        item.quantity = quantity
        await commit_or_raise(self.db, "update cart item")
        return await self.get_cart(user_id)

    async def remove_item(self, user_id: str, item_id: uuid.UUID) -> None:
        owned = select(Cart.id).where(Cart.user_id == user_id)
        await self.db.execute(
            delete(CartItem).where(CartItem.id == item_id, CartItem.cart_id.in_(owned))
        )
        await commit_or_raise(self.db, "remove cart item")

    async def empty_cart(self, user_id: str) -> None:
        owned = select(Cart.id).where(Cart.user_id == user_id)
        await self.db.execute(delete(CartItem).where(CartItem.cart_id.in_(owned)))
        await commit_or_raise(self.db, "empty cart")

    async def delete_cart(self, user_id: str) -> None:
        """Remove the cart and its items entirely."""
        owned = select(Cart.id).where(Cart.user_id == user_id)
        await self.db.execute(delete(CartItem).where(CartItem.cart_id.in_(owned)))
        await self.db.execute(delete(Cart).where(Cart.user_id == user_id))
        await commit_or_raise(self.db, "delete cart")

    async def get_cart(self, user_id: str) -> dict:
        cart = await self.get_or_create_cart(user_id)
        items = []
        total = Decimal("0")
        for item in sorted(cart.items, key=lambda i: i.product.name):
            product = item.product
            subtotal = to_money(product.price * item.quantity)
            total += subtotal
            items.append(
                {
                    "id": item.id,
                    "product_id": product.id,
                    "product_name": product.name,
                    "price": to_money(product.price),
                    "quantity": item.quantity,
                    "stock": product.stock,
                    "image_url": public_image_url(product.image_url),
                    "subtotal": subtotal,
                }
            )
        return {"cart_id": cart.id, "items": items, "total": to_money(total)}

    async def _release_pending_orders(self, user_id: str) -> list[uuid.UUID]:
        """Cancel the user's unpaid orders and give their reserved stock back.

        Runs inside the checkout transaction, so a failed checkout keeps the
        earlier reservations.
        """
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id, Order.status == OrderStatus.PENDING)
            .options(selectinload(Order.items))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        released = []
        for previous in result.scalars().all():
            for item in previous.items:
                await self.stock.restock(item.product_id, item.quantity)
            previous.status = OrderStatus.CANCELLED
            released.append(previous.id)
        return released

    async def checkout(
        self, user_id: str, address_id: Optional[uuid.UUID], frontend_url: Optional[str]
    ) -> dict:
        """Turn the cart into a pending order and open a payment session.

        Prices and stock are read live, not from the cart. The cart itself is
        left intact until the payment is confirmed, and any earlier unpaid
        order of the user is cancelled so its stock can be taken again.
        """
        if not address_id:
            raise ValidationError("A shipping address is required")
        if not frontend_url:
            raise ValidationError("frontendUrl is required")

        cart = await self._find_cart(user_id)
        if not cart or not cart.items:
            raise ValidationError("Cart is empty")

        address = await self.db.scalar(
            select(Address).where(Address.id == address_id, Address.user_id == user_id)
        )
        if not address:
            raise NotFoundError("Address not found")

        order = Order(user_id=user_id, address_id=address_id, status=OrderStatus.PENDING)
        try:
            released = await self._release_pending_orders(user_id)
            if released:
                cart = await self._find_cart(user_id)

            total = Decimal("0")
            for item in cart.items:
                product = item.product
                if product.stock < item.quantity:
                    raise StockError(
                        f"Insufficient stock for product {product.name}",
                        product_id=product.id,
                    )
                total += product.price * item.quantity
                order.items.append(
                    OrderItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=item.quantity,
                        price=product.price,
                    )
                )
            order.total = to_money(total)

            self.db.add(order)
            for item in cart.items:
                await self.stock.reserve(item.product_id, item.quantity)
            await commit_or_raise(self.db, "create order")
        except Exception:
            await self.db.rollback()
            raise

        for previous_id in released:
            logger.info(
                "Pending order %s of user %s cancelled by a new checkout",
                previous_id,
                user_id,
            )

        logger.info(
            "Order %s created for user %s (total=%s, items=%d)",
            order.id,
            user_id,
            order.total,
            len(order.items),
        )
        if self.notifier is not None:
            fire_and_forget(
                self.notifier.notify_admin(
                    f"New order placed by user {user_id}. Order ID: {order.id}"
                ),
                "admin new-order notification",
            )

        url = await self.payments.create_checkout_session(order.id, frontend_url)
        return {"orderId": str(order.id), "url": url}
