"""Order lifecycle: status transitions, cancellation and returns.

Transitions commit first; refunds and customer emails run afterwards and
never undo a committed transition.
"""

import uuid
from typing import Optional

from libs.common.config import get_settings
from libs.common.errors import NotFoundError, StateError, ValidationError
from libs.common.labels import order_status_label
from libs.common.logging import get_logger
from libs.db.session import commit_or_raise
from services.payments_service.models import Payment
from services.store_service.models import (
    NON_CANCELLABLE_STATUSES,
    RETURNABLE_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    ReturnRequest,
    ReturnStatus,
    User,
)
from services.store_service.services.cart_service import public_image_url
from services.store_service.services.stock_ledger import StockLedger
from services.store_service.services.totals import reconstruct_original_total
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


def order_view(order: Order) -> dict:
    """Serialise an order with its display total and status label."""
    address = order.address
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status.value,
        "status_label": order_status_label(order.status),
        "total": reconstruct_original_total(
            order.total, order.total_paid, order.discount_amount
        ),
        "total_paid": order.total_paid,
        "discount_amount": order.discount_amount,
        "promotion_code": order.promotion_code,
        "tracking_number": order.tracking_number,
        "address": (
            {
                "id": address.id,
                "full_name": f"{address.first_name} {address.last_name}",
                "street": address.street,
                "city": address.city,
                "province": address.province,
                "postal_code": address.postal_code,
                "country": address.country,
                "phone": address.phone,
            }
            if address
            else None
        ),
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "price": item.price,
                "image_url": public_image_url(item.product.image_url) if item.product else None,
                "size": item.product.size if item.product else None,
                "color": item.product.color if item.product else None,
                "sku": item.product.sku if item.product else None,
            }
            for item in order.items
        ],
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def return_view(request: ReturnRequest) -> dict:
    return {
        "id": request.id,
        "order_id": request.order_id,
        "user_id": request.user_id,
        "reason": request.reason,
        "total_amount": request.total_amount,
        "status": request.status.value,
        "created_at": request.created_at,
        "updated_at": request.updated_at,
    }


class OrderService:
    """Order state machine.

    ``payments`` issues refunds (``refund_order_payments``) and ``mailer``
    delivers customer emails.
    """

    def __init__(self, db: AsyncSession, payments, mailer=None):
        self.db = db
        self.payments = payments
        self.mailer = mailer
        self.stock = StockLedger(db)

    def _order_query(self):
        return (
            select(Order)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.address),
            )
            .execution_options(populate_existing=True)
        )

    async def _load(self, order_id: uuid.UUID, user_id: Optional[str] = None) -> Order:
        query = self._order_query().where(Order.id == order_id)
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        order = await self.db.scalar(query)
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def _email_customer(
        self, user_id: str, subject: str, template: str, context: dict
    ) -> None:
        if self.mailer is None:
            return
        user = await self.db.get(User, user_id)
        if not user:
            logger.warning("No user %s to email about %s", user_id, template)
            return
        try:
            await self.mailer.send_mail(
                user.email,
                subject,
                template,
                {
                    "customer_name": user.full_name,
                    "currency": get_settings().CURRENCY,
                    **context,
                },
            )
        except Exception as e:
            logger.error("Sending %s email to %s failed: %s", template, user.email, e)

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_user_orders(self, user_id: str) -> list[dict]:
        orders = (
            await self.db.scalars(
                self._order_query()
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc())
            )
        ).all()
        return [order_view(o) for o in orders]

    async def list_all_orders(self) -> list[dict]:
        orders = (
            await self.db.scalars(self._order_query().order_by(Order.created_at.desc()))
        ).all()
        return [order_view(o) for o in orders]

    async def get_order(self, order_id: uuid.UUID) -> dict:
        return order_view(await self._load(order_id))

    async def get_user_order(self, order_id: uuid.UUID, user_id: str) -> dict:
        """Same as ``get_order`` but only for the owner."""
        return order_view(await self._load(order_id, user_id))

    async def list_user_returns(self, user_id: str) -> list[dict]:
        requests = (
            await self.db.scalars(
                select(ReturnRequest)
                .where(ReturnRequest.user_id == user_id)
                .order_by(ReturnRequest.created_at.desc())
            )
        ).all()
        return [return_view(r) for r in requests]

    async def list_all_returns(self) -> list[dict]:
        requests = (
            await self.db.scalars(
                select(ReturnRequest).order_by(ReturnRequest.created_at.desc())
            )
        ).all()
        return [return_view(r) for r in requests]

    # =========================================================================
    # Transitions
    # =========================================================================

    async def update_order_status(
        self,
        order_id: uuid.UUID,
        status: str,
        tracking_number: Optional[str] = None,
    ) -> dict:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid order status: {status}") from None

        order = await self._load(order_id)
        order.status = new_status
        if tracking_number:
            order.tracking_number = tracking_number
        await commit_or_raise(self.db, "update order status")
        logger.info("Order %s moved to %s", order_id, new_status.value)

        user_id = order.user_id
        if new_status == OrderStatus.SHIPPED:
            await self._email_customer(
                user_id,
                f"Your order #{order_id} has shipped",
                "order_shipped",
                {"order_id": str(order_id), "tracking_number": tracking_number},
            )
        elif new_status == OrderStatus.DELIVERED:
            await self._email_customer(
                user_id,
                f"Your order #{order_id} was delivered",
                "order_delivered",
                {"order_id": str(order_id)},
            )
        elif new_status == OrderStatus.RETURNED:
            # Stock is not restored for returned goods
            refunded = await self.payments.refund_order_payments(order_id)
            logger.info("Order %s returned, refunded %s", order_id, refunded)
            await self._email_customer(
                user_id,
                f"Return completed for order #{order_id}",
                "return_completed",
                {"order_id": str(order_id), "refunded_amount": refunded},
            )

        return {"message": "Order status updated", "status": new_status.value}

    async def cancel_order(self, order_id: uuid.UUID, user_id: str) -> dict:
        """Cancel an unshipped order, restock its items and refund captured payments."""
        order = await self._load(order_id, user_id)
        if order.status in NON_CANCELLABLE_STATUSES:
            raise StateError(
                f"Order cannot be cancelled while {order_status_label(order.status).lower()}"
            )

        order.status = OrderStatus.CANCELLED
        for item in order.items:
            await self.stock.restock(item.product_id, item.quantity)
        await commit_or_raise(self.db, "cancel order")
        logger.info("Order %s cancelled by user %s", order_id, user_id)

        refunded = await self.payments.refund_order_payments(order_id)

        await self._email_customer(
            user_id,
            f"Order #{order_id} cancelled",
            "order_cancelled",
            {"order_id": str(order_id), "refunded_amount": refunded},
        )
        return {"message": "Order cancelled", "refundedAmount": refunded}

    async def delete_order(self, order_id: uuid.UUID) -> dict:
        order = await self._load(order_id)
        # Payment rows reference the order; remove them with it
        await self.db.execute(delete(Payment).where(Payment.order_id == order_id))
        await self.db.execute(
            delete(ReturnRequest).where(ReturnRequest.order_id == order_id)
        )
        await self.db.delete(order)
        await commit_or_raise(self.db, "delete order")
        logger.info("Order %s deleted", order_id)
        return {"message": "Order deleted"}

    async def request_return(self, order_id: uuid.UUID, user_id: str, reason: str) -> dict:
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to request a return")
        order = await self._load(order_id, user_id)
        if order.status not in RETURNABLE_STATUSES:
            raise StateError("Only shipped or completed orders can be returned")

        request = ReturnRequest(
            order_id=order.id,
            user_id=user_id,
            reason=reason.strip(),
            total_amount=order.total_paid,
            status=ReturnStatus.PENDING,
        )
        self.db.add(request)
        await commit_or_raise(self.db, "create return request")
        logger.info("Return %s requested for order %s", request.id, order_id)
        return {
            "message": "Return requested, pending approval",
            "returnId": request.id,
        }

    async def update_return_status(self, return_id: uuid.UUID, status: str) -> dict:
        """Approve or reject a pending return. Approval does not refund."""
        if status not in (ReturnStatus.APPROVED.value, ReturnStatus.REJECTED.value):
            raise ValidationError(f"Invalid return status: {status}")
        new_status = ReturnStatus(status)

        request = await self.db.get(ReturnRequest, return_id)
        if not request:
            raise NotFoundError("Return request not found")
        if request.status != ReturnStatus.PENDING:
            raise StateError(f"Return request already {request.status.value}")

        request.status = new_status
        order_id = request.order_id
        user_id = request.user_id
        if new_status == ReturnStatus.APPROVED:
            order = await self.db.get(Order, order_id)
            if order:
                order.status = OrderStatus.AWAITING_RETURN
        await commit_or_raise(self.db, "update return status")
        logger.info("Return %s %s", return_id, new_status.value)

        if new_status == ReturnStatus.APPROVED:
            await self._email_customer(
                user_id,
                f"Return approved for order #{order_id}",
                "return_approved",
                {"order_id": str(order_id)},
            )
        else:
            await self._email_customer(
                user_id,
                f"Return rejected for order #{order_id}",
                "return_rejected",
                {"order_id": str(order_id)},
            )
        return {"message": f"Return {new_status.value}"}
