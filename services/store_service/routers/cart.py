"""Store cart router: cart lines and checkout."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.store_service.dependencies import get_cart_service
from services.store_service.schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
)
from services.store_service.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.get_cart(current_user.user_id)


@router.post("/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    payload: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    """Add a product; adding an existing product increases its quantity."""
    return await carts.add_item(current_user.user_id, payload.product_id, payload.quantity)


@router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: uuid.UUID,
    payload: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.update_item(current_user.user_id, item_id, payload.quantity)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_cart_item(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    await carts.remove_item(current_user.user_id, item_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def empty_cart(
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    await carts.empty_cart(current_user.user_id)


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    payload: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    carts: CartService = Depends(get_cart_service),
):
    """Create a pending order from the cart and return the payment page URL."""
    return await carts.checkout(
        current_user.user_id, payload.address_id, payload.frontend_url
    )
