"""Product stock ledger: conditional reservations and restocks."""

import uuid

from libs.common.errors import NotFoundError, StockError, ValidationError
from libs.common.logging import get_logger
from services.store_service.models import Product
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class StockLedger:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: uuid.UUID) -> Product:
        result = await self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def reserve(self, product_id: uuid.UUID, quantity: int) -> None:
        """Decrement stock only if enough units remain.

        The check and the decrement happen in one UPDATE so two concurrent
        checkouts can never both take the last unit.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            product = await self.db.get(Product, product_id)
            name = product.name if product else str(product_id)
            raise StockError(
                f"Insufficient stock for product {name}", product_id=product_id
            )
        logger.info("Reserved %d units of product %s", quantity, product_id)

    async def restock(self, product_id: uuid.UUID, quantity: int) -> None:
        await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        logger.info("Restocked %d units of product %s", quantity, product_id)
