"""Customer shipping addresses."""

import uuid

from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from libs.db.session import commit_or_raise
from services.store_service.models import Address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class AddressService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _owned(self, user_id: str, address_id: uuid.UUID) -> Address:
        address = await self.db.scalar(
            select(Address).where(Address.id == address_id, Address.user_id == user_id)
        )
        if not address:
            raise NotFoundError("Address not found")
        return address

    async def create_address(self, user_id: str, data: dict) -> Address:
        address = Address(user_id=user_id, **data)
        if not address.type:
            address.type = "shipping"
        self.db.add(address)
        await commit_or_raise(self.db, "create address")
        logger.info("Address %s added for user %s", address.id, user_id)
        return address

    async def list_addresses(self, user_id: str) -> list[Address]:
        result = await self.db.execute(
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.created_at)
        )
        return list(result.scalars().all())

    async def update_address(
        self, user_id: str, address_id: uuid.UUID, data: dict
    ) -> Address:
        """Partial update: only the fields present in ``data`` change."""
        address = await self._owned(user_id, address_id)
        for field, value in data.items():
            setattr(address, field, value)
        await commit_or_raise(self.db, "update address")
        return address

    async def delete_address(self, user_id: str, address_id: uuid.UUID) -> None:
        # Orders keep their row; their address reference is nulled by the FK
        address = await self._owned(user_id, address_id)
        await self.db.delete(address)
        await commit_or_raise(self.db, "delete address")
        logger.info("Address %s of user %s deleted", address_id, user_id)
