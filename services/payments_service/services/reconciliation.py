"""Payment reconciliation: checkout sessions, provider events and refunds.

Provider events are delivered at least once. Applying a completion event is
keyed on "does a completed or refunded Payment exist for this order, or a
Payment carrying the same provider transaction", so a redelivered event is
acknowledged without touching the order again.
"""

import hashlib
import hmac
import json
import time
import uuid
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import from_minor_units, to_minor_units, to_money
from libs.common.emails.core import Attachment
from libs.common.errors import NotFoundError, ProviderError, SignatureError, ValidationError
from libs.common.logging import get_logger
from libs.common.notifications import fire_and_forget
from libs.db.session import commit_or_raise
from services.payments_service.models import Payment, PaymentMethod, PaymentStatus
from services.store_service.models import Order, OrderStatus
from services.store_service.services.cart_service import CartService
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


# ---------------------------------------------------------------------------
# Webhook signatures
# ---------------------------------------------------------------------------


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def verify_stripe_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = 300,
    now: Optional[float] = None,
) -> None:
    """Check a ``stripe-signature`` header (``t=<ts>,v1=<hex>[,v1=<hex>]``)."""
    if not secret:
        raise SignatureError("Webhook secret is not configured")
    if not header:
        raise SignatureError("Missing stripe-signature header")

    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)

    try:
        timestamp = int(timestamp)
    except (TypeError, ValueError):
        raise SignatureError("Invalid stripe-signature header") from None
    if not signatures:
        raise SignatureError("No v1 signature in stripe-signature header")

    expected = compute_signature(payload, timestamp, secret)
    if not any(hmac.compare_digest(expected, s) for s in signatures):
        raise SignatureError("Webhook signature mismatch")

    current = time.time() if now is None else now
    if tolerance and abs(current - timestamp) > tolerance:
        raise SignatureError("Webhook timestamp outside the tolerance zone")


# ---------------------------------------------------------------------------
# Best-effort session enrichments
# ---------------------------------------------------------------------------


def extract_discount(session: dict) -> Decimal:
    """Discount applied on the hosted page, in major units. Zero when unknown."""
    try:
        total_details = session.get("total_details") or {}
        if total_details.get("amount_discount"):
            return from_minor_units(total_details["amount_discount"])

        discounts = (total_details.get("breakdown") or {}).get("discounts") or session.get(
            "discounts"
        ) or []
        if discounts:
            first = discounts[0]
            for amount_off in (
                first.get("amount_off"),
                (first.get("coupon") or {}).get("amount_off"),
                ((first.get("discount") or {}).get("coupon") or {}).get("amount_off"),
            ):
                if amount_off:
                    return from_minor_units(amount_off)
    except (AttributeError, TypeError, ValueError, IndexError) as e:
        logger.warning("Could not read discount from session: %s", e)
    return Decimal("0.00")


class ReconciliationEngine:
    """Applies provider outcomes to local Order/Payment state.

    Collaborators are injected: ``provider`` (Stripe client), ``mailer``,
    ``notifier`` and ``invoice`` (invoice data + PDF rendering).
    """

    def __init__(
        self,
        db: AsyncSession,
        provider,
        mailer=None,
        notifier=None,
        invoice=None,
    ):
        self.db = db
        self.provider = provider
        self.mailer = mailer
        self.notifier = notifier
        self.invoice = invoice
        self.settings = get_settings()

    # =========================================================================
    # Checkout sessions
    # =========================================================================

    async def create_checkout_session(self, order_id: uuid.UUID, frontend_url: str) -> str:
        """Request a hosted payment page for the order total. Returns its URL."""
        order = await self.db.get(Order, order_id)
        if not order:
            raise NotFoundError("Order not found")

        base = frontend_url.rstrip("/")
        session = await self.provider.create_checkout_session(
            amount_minor=to_minor_units(order.total),
            currency=self.settings.CURRENCY,
            product_name=f"Order #{order.id}",
            success_url=f"{base}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base}/cancel",
            metadata={"orderId": str(order.id)},
            allow_promotion_codes=True,
        )
        logger.info("Checkout session %s created for order %s", session.id, order.id)
        return session.url

    # =========================================================================
    # Provider events
    # =========================================================================

    def verify_webhook(self, payload: bytes, signature_header: Optional[str]) -> dict:
        """Verify the signature and decode the event envelope."""
        verify_stripe_signature(
            payload,
            signature_header,
            self.settings.STRIPE_WEBHOOK_SECRET,
            self.settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
        )
        try:
            return json.loads(payload.decode("utf-8") or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("Malformed webhook payload") from None

    async def _retrieve_session(self, session: dict) -> dict:
        if not session.get("id"):
            return session
        try:
            return await self.provider.retrieve_checkout_session(session["id"])
        except ProviderError as e:
            logger.warning(
                "Could not retrieve session %s, using event payload: %s",
                session["id"],
                e.message,
            )
            return session

    async def _promotion_code(self, session: dict) -> Optional[str]:
        try:
            discounts = session.get("discounts") or []
            if discounts:
                promo = discounts[0].get("promotion_code")
                if isinstance(promo, dict):
                    return promo.get("code")
                if promo:
                    promo_obj = await self.provider.retrieve_promotion_code(promo)
                    return promo_obj.get("code")
            return (session.get("metadata") or {}).get("promotion_code")
        except Exception as e:
            logger.warning("Could not resolve promotion code: %s", e)
            return None

    async def handle_payment_event(self, event: dict) -> bool:
        """Apply a provider event. Returns True when local state changed."""
        event_type = event.get("type")
        if event_type != CHECKOUT_COMPLETED:
            logger.info("Ignoring provider event %s", event_type)
            return False

        session = (event.get("data") or {}).get("object") or {}
        raw_order_id = (session.get("metadata") or {}).get("orderId")
        if not raw_order_id:
            raise ValidationError("orderId missing from session metadata")
        try:
            order_id = uuid.UUID(str(raw_order_id))
        except ValueError:
            raise ValidationError(f"Invalid orderId in metadata: {raw_order_id}") from None

        session = await self._retrieve_session(session)
        total_paid = from_minor_units(session.get("amount_total") or 0)
        discount = extract_discount(session)
        promotion_code = await self._promotion_code(session)

        order = await self.db.scalar(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not order:
            raise NotFoundError(f"Order {order_id} not found")

        # IDEMPOTENCY CHECK: a settled payment or known transaction means it was applied
        transaction_id = session.get("payment_intent")
        applied = and_(
            Payment.order_id == order_id,
            Payment.status.in_((PaymentStatus.COMPLETED, PaymentStatus.REFUNDED)),
        )
        if transaction_id:
            applied = or_(applied, Payment.transaction_id == transaction_id)
        already_paid = await self.db.scalar(select(Payment.id).where(applied).limit(1))
        if already_paid:
            logger.info(
                "Completion event for order %s skipped - payment already recorded",
                order_id,
                extra={"extra_fields": {"order_id": str(order_id), "session_id": session.get("id")}},
            )
            await self.db.rollback()
            return False

        order.status = OrderStatus.COMPLETED
        order.total = total_paid
        order.total_paid = total_paid
        order.discount_amount = discount
        order.promotion_code = promotion_code
        self.db.add(
            Payment(
                order_id=order.id,
                transaction_id=transaction_id,
                amount=total_paid,
                status=PaymentStatus.COMPLETED,
                method=PaymentMethod.CARD,
                discount_amount=discount,
                promotion_code=promotion_code,
            )
        )
        await commit_or_raise(self.db, "record payment")

        logger.info(
            "Payment captured for order %s (paid=%s, discount=%s, promo=%s)",
            order.id,
            total_paid,
            discount,
            promotion_code,
            extra={"extra_fields": {"order_id": str(order.id), "session_id": session.get("id")}},
        )

        await self._after_capture(order.id, order.user_id, total_paid, discount)
        return True

    async def _after_capture(
        self,
        order_id: uuid.UUID,
        user_id: str,
        total_paid: Decimal,
        discount: Decimal,
    ) -> None:
        """Side effects of a captured payment. Failures are logged only."""
        try:
            await CartService(self.db).delete_cart(user_id)
            logger.info("Cart of user %s deleted after payment", user_id)
        except Exception as e:
            logger.warning("Could not delete cart of user %s: %s", user_id, e)

        if self.invoice is not None and self.mailer is not None:
            try:
                data = await self.invoice.get_order_data(order_id)
                pdf = self.invoice.generate_pdf_buffer(data)
                if data.customer_email:
                    await self.mailer.send_mail(
                        data.customer_email,
                        f"Order confirmation #{order_id}",
                        "order_confirmation",
                        {
                            "customer_name": data.customer_name,
                            "order_id": str(order_id),
                            "items": [
                                {"name": i.name, "quantity": i.quantity, "price": i.unit_price}
                                for i in data.items
                            ],
                            "total_paid": total_paid,
                            "discount_amount": discount,
                            "currency": data.currency,
                        },
                        attachments=[Attachment(f"invoice-{order_id}.pdf", pdf)],
                    )
            except Exception as e:
                logger.error("Order confirmation for %s failed: %s", order_id, e)

        if self.notifier is not None:
            fire_and_forget(
                self.notifier.notify_admin(f"Payment received for order {order_id}"),
                "admin payment notification",
            )

    # =========================================================================
    # Refunds
    # =========================================================================

    async def refund(self, payment: Payment) -> bool:
        """Refund one payment. The row is only marked refunded once the provider confirms."""
        if not payment.transaction_id:
            logger.warning("Payment %s has no transaction id, refund skipped", payment.id)
            return False
        try:
            await self.provider.create_refund(payment.transaction_id)
        except ProviderError as e:
            logger.error(
                "Refund of payment %s (%s) failed: %s",
                payment.id,
                payment.transaction_id,
                e.message,
            )
            return False

        payment.status = PaymentStatus.REFUNDED
        await commit_or_raise(self.db, "mark payment refunded")
        logger.info("Payment %s refunded (%s)", payment.id, payment.amount)
        return True

    async def refund_order_payments(self, order_id: uuid.UUID) -> Decimal:
        """Refund every completed payment of an order. Returns the refunded total."""
        payments = (
            await self.db.scalars(
                select(Payment).where(
                    Payment.order_id == order_id,
                    Payment.status == PaymentStatus.COMPLETED,
                )
            )
        ).all()

        refunded = Decimal("0")
        for payment in payments:
            if await self.refund(payment):
                refunded += payment.amount
        return to_money(refunded)
