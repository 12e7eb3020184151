"""Invoice data assembly and PDF rendering for orders."""

import uuid

from libs.common.config import get_settings
from libs.common.errors import NotFoundError
from libs.common.labels import (
    order_status_label,
    payment_method_label,
    payment_status_label,
)
from libs.common.pdf import InvoiceLine, InvoicePayment, OrderData, generate_invoice_pdf
from services.payments_service.models import Payment
from services.store_service.models import Order, User
from services.store_service.services.totals import reconstruct_original_total
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


class InvoiceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order_data(self, order_id: uuid.UUID) -> OrderData:
        order = await self.db.scalar(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items), selectinload(Order.address))
            .execution_options(populate_existing=True)
        )
        if not order:
            raise NotFoundError("Order not found")

        user = await self.db.get(User, order.user_id)
        payments = (
            await self.db.scalars(
                select(Payment)
                .where(Payment.order_id == order.id)
                .order_by(Payment.created_at)
            )
        ).all()

        return OrderData(
            order_id=str(order.id),
            created_at=order.created_at,
            status_label=order_status_label(order.status),
            customer_name=user.full_name if user else order.user_id,
            customer_email=user.email if user else None,
            shipping_address=order.address.as_lines() if order.address else [],
            items=[
                InvoiceLine(name=i.product_name, quantity=i.quantity, unit_price=i.price)
                for i in order.items
            ],
            payments=[
                InvoicePayment(
                    method_label=payment_method_label(p.method),
                    status_label=payment_status_label(p.status),
                    amount=p.amount,
                    transaction_id=p.transaction_id,
                )
                for p in payments
            ],
            original_total=reconstruct_original_total(
                order.total, order.total_paid, order.discount_amount
            ),
            total_paid=order.total_paid,
            discount_amount=order.discount_amount,
            promotion_code=order.promotion_code,
            currency=get_settings().CURRENCY,
        )

    def generate_pdf_buffer(self, data: OrderData) -> bytes:
        return generate_invoice_pdf(data)
