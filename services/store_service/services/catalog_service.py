"""Product catalog management and browsing."""

import uuid
from typing import Optional

from libs.common.errors import NotFoundError, StateError, ValidationError
from libs.common.logging import get_logger
from libs.common.notifications import fire_and_forget
from libs.db.session import commit_or_raise
from services.store_service.models import CartItem, OrderItem, Product
from services.store_service.services.cart_service import public_image_url
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def product_view(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "image_url": public_image_url(product.image_url),
        "size": product.size,
        "color": product.color,
        "sku": product.sku,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


class CatalogService:
    """Products CRUD. New products are announced to every connected user."""

    def __init__(self, db: AsyncSession, notifier=None):
        self.db = db
        self.notifier = notifier

    async def _get(self, product_id: uuid.UUID) -> Product:
        product = await self.db.get(Product, product_id, populate_existing=True)
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def _check_sku(self, sku: Optional[str], product_id=None) -> None:
        if not sku:
            return
        query = select(Product.id).where(Product.sku == sku)
        if product_id is not None:
            query = query.where(Product.id != product_id)
        if await self.db.scalar(query):
            raise ValidationError(f"A product with SKU {sku} already exists")

    async def list_products(
        self, search: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> dict:
        query = select(Product)
        if search:
            term = f"%{search}%"
            query = query.where(Product.name.ilike(term) | Product.description.ilike(term))

        total = await self.db.scalar(select(func.count()).select_from(query.subquery())) or 0

        query = query.order_by(Product.name).offset((page - 1) * page_size).limit(page_size)
        products = (await self.db.execute(query)).scalars().all()
        return {
            "items": [product_view(p) for p in products],
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        }

    async def get_product(self, product_id: uuid.UUID) -> dict:
        return product_view(await self._get(product_id))

    async def create_product(self, data: dict) -> dict:
        await self._check_sku(data.get("sku"))
        product = Product(**data)
        self.db.add(product)
        await commit_or_raise(self.db, "create product")
        logger.info("Product %s created (%s)", product.id, product.name)

        if self.notifier is not None:
            fire_and_forget(
                self.notifier.notify_all_users(f"New product available: {product.name}"),
                "new-product notification",
            )
        return product_view(product)

    async def update_product(self, product_id: uuid.UUID, data: dict) -> dict:
        """Partial update: only the fields present in ``data`` change."""
        for field in ("name", "price", "stock"):
            if field in data and data[field] is None:
                raise ValidationError(f"{field} cannot be empty")
        product = await self._get(product_id)
        if "sku" in data:
            await self._check_sku(data["sku"], product_id)
        for field, value in data.items():
            setattr(product, field, value)
        await commit_or_raise(self.db, "update product")
        logger.info("Product %s updated: %s", product_id, sorted(data))
        return product_view(product)

    async def delete_product(self, product_id: uuid.UUID) -> None:
        """Delete a product that was never ordered; carted lines go with it."""
        product = await self._get(product_id)
        ordered = await self.db.scalar(
            select(OrderItem.id).where(OrderItem.product_id == product_id).limit(1)
        )
        if ordered:
            raise StateError(f"Product {product.name} has orders and cannot be deleted")

        await self.db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        await self.db.delete(product)
        await commit_or_raise(self.db, "delete product")
        logger.info("Product %s deleted", product_id)
