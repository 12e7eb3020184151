"""Stripe webhook handler."""

from fastapi import APIRouter, Depends, Request
from libs.common.logging import get_logger
from services.payments_service.dependencies import get_reconciliation_engine
from services.payments_service.schemas import WebhookAck
from services.payments_service.services.reconciliation import ReconciliationEngine

router = APIRouter(prefix="/payments", tags=["payments"])
logger = get_logger(__name__)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    """
    Stripe webhook endpoint (no auth; verified by stripe-signature).
    """
    raw = await request.body()
    event = engine.verify_webhook(raw, request.headers.get("stripe-signature"))

    logger.info(
        "Stripe event %s received",
        event.get("type"),
        extra={"extra_fields": {"event_id": event.get("id"), "event": event.get("type")}},
    )
    await engine.handle_payment_event(event)
    return WebhookAck(received=True)
