"""Admin dashboard aggregates."""

from decimal import Decimal

from libs.common.currency import to_money
from libs.common.labels import order_status_label
from services.store_service.models import (
    Address,
    Order,
    OrderItem,
    Product,
    ReturnRequest,
    User,
)
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def overview(self) -> dict:
        """Sales figures over orders with a captured payment."""
        row = (
            await self.db.execute(
                select(
                    func.coalesce(func.sum(Order.total_paid), 0),
                    func.count(Order.id),
                    func.count(distinct(Order.user_id)),
                ).where(Order.total_paid.is_not(None))
            )
        ).one()
        total_sales = to_money(row[0] or 0)
        paid_orders = int(row[1] or 0)
        total_orders = int(await self.db.scalar(select(func.count(Order.id))) or 0)
        total_users = int(await self.db.scalar(select(func.count(User.id))) or 0)
        return {
            "total_sales": total_sales,
            "total_orders": total_orders,
            "paid_orders": paid_orders,
            "avg_order_value": (
                to_money(total_sales / paid_orders) if paid_orders else Decimal("0.00")
            ),
            "paying_customers": int(row[2] or 0),
            "total_users": total_users,
        }

    async def orders_by_status(self) -> list[dict]:
        rows = (
            await self.db.execute(
                select(Order.status, func.count(Order.id))
                .group_by(Order.status)
                .order_by(func.count(Order.id).desc())
            )
        ).all()
        return [
            {
                "status": status.value,
                "status_label": order_status_label(status),
                "count": int(count),
            }
            for status, count in rows
        ]

    async def recent_orders(self, limit: int = 10) -> list[dict]:
        rows = (
            await self.db.execute(
                select(Order, User, Address)
                .outerjoin(User, User.id == Order.user_id)
                .outerjoin(Address, Address.id == Order.address_id)
                .order_by(Order.created_at.desc())
                .limit(limit)
            )
        ).all()
        return [
            {
                "id": order.id,
                "user_id": order.user_id,
                "total": order.total,
                "status": order.status.value,
                "status_label": order_status_label(order.status),
                "created_at": order.created_at,
                "first_name": user.first_name if user else None,
                "last_name": user.last_name if user else None,
                "email": user.email if user else None,
                "city": address.city if address else None,
            }
            for order, user, address in rows
        ]

    async def top_products(self, limit: int = 5) -> list[dict]:
        total_quantity = func.sum(OrderItem.quantity).label("total_quantity")
        rows = (
            await self.db.execute(
                select(
                    Product.id,
                    Product.name,
                    Product.image_url,
                    total_quantity,
                    func.sum(OrderItem.quantity * OrderItem.price).label("total_revenue"),
                )
                .select_from(OrderItem)
                .join(Product, Product.id == OrderItem.product_id)
                .group_by(Product.id, Product.name, Product.image_url)
                .order_by(total_quantity.desc())
                .limit(limit)
            )
        ).all()
        return [
            {
                "product_id": r.id,
                "product_name": r.name,
                "image_url": r.image_url,
                "total_quantity": int(r.total_quantity or 0),
                "total_revenue": to_money(r.total_revenue or 0),
            }
            for r in rows
        ]

    async def returns_summary(self) -> list[dict]:
        rows = (
            await self.db.execute(
                select(
                    ReturnRequest.status,
                    func.count(ReturnRequest.id),
                    func.coalesce(func.sum(ReturnRequest.total_amount), 0),
                ).group_by(ReturnRequest.status)
            )
        ).all()
        return [
            {"status": status.value, "count": int(count), "total_amount": to_money(total)}
            for status, count, total in rows
        ]
