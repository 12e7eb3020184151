"""Store addresses router: the caller's shipping addresses."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.store_service.dependencies import get_address_service
from services.store_service.schemas import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
)
from services.store_service.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.post("", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    payload: AddressCreate,
    current_user: AuthUser = Depends(get_current_user),
    addresses: AddressService = Depends(get_address_service),
):
    return await addresses.create_address(current_user.user_id, payload.model_dump())


@router.get("", response_model=list[AddressResponse])
async def list_addresses(
    current_user: AuthUser = Depends(get_current_user),
    addresses: AddressService = Depends(get_address_service),
):
    return await addresses.list_addresses(current_user.user_id)


@router.put("/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: uuid.UUID,
    payload: AddressUpdate,
    current_user: AuthUser = Depends(get_current_user),
    addresses: AddressService = Depends(get_address_service),
):
    """Update the fields sent; omitted or null fields keep their value."""
    return await addresses.update_address(
        current_user.user_id,
        address_id,
        payload.model_dump(exclude_unset=True, exclude_none=True),
    )


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    addresses: AddressService = Depends(get_address_service),
):
    await addresses.delete_address(current_user.user_id, address_id)
