"""Hosted checkout session creation."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError
from services.payments_service.dependencies import get_reconciliation_engine
from services.payments_service.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
)
from services.payments_service.services.reconciliation import ReconciliationEngine
from services.store_service.models import Order

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payload: CheckoutSessionRequest,
    current_user: AuthUser = Depends(get_current_user),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    """Open a new payment page for one of the caller's orders."""
    order = await engine.db.get(Order, payload.order_id)
    if not order or (order.user_id != current_user.user_id and not current_user.is_admin):
        raise NotFoundError("Order not found")

    url = await engine.create_checkout_session(payload.order_id, payload.frontend_url)
    return CheckoutSessionResponse(url=url)
