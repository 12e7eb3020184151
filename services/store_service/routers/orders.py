"""Store orders router: order history, cancellation, returns and admin status changes."""

import uuid

from fastapi import APIRouter, Depends, Response
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from services.store_service.dependencies import get_invoice_service, get_order_service
from services.store_service.schemas import (
    CancelOrderResponse,
    MessageResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderStatusUpdated,
    ReturnCreate,
    ReturnCreatedResponse,
    ReturnResponse,
    ReturnStatusUpdate,
)
from services.store_service.services.invoice_service import InvoiceService
from services.store_service.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


# ============================================================================
# COLLECTIONS
# ============================================================================


@router.get("", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.list_user_orders(current_user.user_id)


@router.get("/all", response_model=list[OrderResponse])
async def list_all_orders(
    _admin: AuthUser = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.list_all_orders()


# ============================================================================
# RETURNS
# ============================================================================


@router.get("/returns/me", response_model=list[ReturnResponse])
async def list_my_returns(
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.list_user_returns(current_user.user_id)


@router.get("/returns", response_model=list[ReturnResponse])
async def list_all_returns(
    _admin: AuthUser = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.list_all_returns()


@router.put("/returns/{return_id}/status", response_model=MessageResponse)
async def update_return_status(
    return_id: uuid.UUID,
    payload: ReturnStatusUpdate,
    _admin: AuthUser = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    """Approve or reject a pending return request."""
    return await orders.update_return_status(return_id, payload.status)


# ============================================================================
# SINGLE ORDER
# ============================================================================


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
):
    if current_user.is_admin:
        return await orders.get_order(order_id)
    return await orders.get_user_order(order_id, current_user.user_id)


@router.get("/{order_id}/invoice")
async def download_invoice(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    if not current_user.is_admin:
        # Ownership check
        await orders.get_user_order(order_id, current_user.user_id)
    data = await invoices.get_order_data(order_id)
    pdf = invoices.generate_pdf_buffer(data)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{order_id}.pdf"'},
    )


@router.put("/{order_id}/status", response_model=OrderStatusUpdated)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    _admin: AuthUser = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.update_order_status(
        order_id, payload.status, payload.tracking_number
    )


@router.post("/{order_id}/cancel", response_model=CancelOrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.cancel_order(order_id, current_user.user_id)


@router.post("/{order_id}/return", response_model=ReturnCreatedResponse)
async def request_return(
    order_id: uuid.UUID,
    payload: ReturnCreate,
    current_user: AuthUser = Depends(get_current_user),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.request_return(order_id, current_user.user_id, payload.reason)


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    orders: OrderService = Depends(get_order_service),
):
    return await orders.delete_order(order_id)
