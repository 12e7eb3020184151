"""Unit tests for the payment reconciliation engine.

Tests drive ReconciliationEngine with the fake Stripe provider; no HTTP
layer involved.
"""

import asyncio
import uuid
from decimal import Decimal

import pytest
from libs.common.errors import NotFoundError, ValidationError
from services.payments_service.models import Payment, PaymentStatus
from services.payments_service.services.reconciliation import extract_discount
from services.store_service.models import Cart, CartItem, Order, OrderStatus
from services.store_service.services.totals import reconstruct_original_total
from sqlalchemy import func, select
from tests.factories import (
    OrderFactory,
    PaymentFactory,
    ProductFactory,
    UserFactory,
    checkout_completed_event,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _pending_order_with_cart(db, total=Decimal("50.00")):
    user = UserFactory.create()
    product = ProductFactory.create()
    db.add_all([user, product])
    await db.commit()

    order = OrderFactory.create(user.id, total=total)
    cart = Cart(user_id=user.id)
    db.add_all([order, cart])
    await db.commit()
    db.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=1))
    await db.commit()
    return user, order


async def _completed_payments(db, order_id) -> int:
    return await db.scalar(
        select(func.count(Payment.id)).where(
            Payment.order_id == order_id, Payment.status == PaymentStatus.COMPLETED
        )
    )


# ---------------------------------------------------------------------------
# create_checkout_session
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_session_for_missing_order(payments):
    with pytest.raises(NotFoundError):
        await payments.create_checkout_session(uuid.uuid4(), "https://shop.test")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_session_has_no_db_side_effects(db_session, payments, fake_stripe):
    _, order = await _pending_order_with_cart(db_session, total=Decimal("19.99"))

    url = await payments.create_checkout_session(order.id, "https://shop.test")

    assert url.startswith("https://checkout.stripe.test/")
    assert fake_stripe.created_sessions[0]["amount_minor"] == 1999
    assert fake_stripe.created_sessions[0]["currency"] == "eur"
    assert await db_session.scalar(select(func.count(Payment.id))) == 0
    await db_session.refresh(order)
    assert order.status == OrderStatus.PENDING


# ---------------------------------------------------------------------------
# handle_payment_event
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completion_event_captures_payment(
    db_session, payments, fake_mailer, fake_notifier
):
    user, order = await _pending_order_with_cart(db_session)
    event = checkout_completed_event(order.id, amount_total=5000)

    applied = await payments.handle_payment_event(event)

    assert applied is True
    await db_session.refresh(order)
    assert order.status == OrderStatus.COMPLETED
    assert order.total == Decimal("50.00")
    assert order.total_paid == Decimal("50.00")
    assert order.discount_amount == Decimal("0.00")

    payment = await db_session.scalar(select(Payment).where(Payment.order_id == order.id))
    assert payment.status == PaymentStatus.COMPLETED
    assert payment.transaction_id == event["data"]["object"]["payment_intent"]
    assert payment.method.value == "card"

    # Cart is removed once the payment is confirmed
    assert await db_session.scalar(select(Cart).where(Cart.user_id == user.id)) is None

    assert fake_mailer.templates() == ["order_confirmation"]
    mail = fake_mailer.sent[0]
    assert mail["to"] == user.email
    assert mail["attachments"][0].filename == f"invoice-{order.id}.pdf"

    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert fake_notifier.admin_messages == [f"Payment received for order {order.id}"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_completion_event_is_a_no_op(db_session, payments, fake_mailer):
    """Redelivery yields exactly one completed payment and total_paid set once."""
    _, order = await _pending_order_with_cart(db_session)
    order_id = order.id
    event = checkout_completed_event(order_id, amount_total=5000)

    first = await payments.handle_payment_event(event)
    second = await payments.handle_payment_event(event)

    assert (first, second) == (True, False)
    assert await _completed_payments(db_session, order_id) == 1
    await db_session.refresh(order)
    assert order.total_paid == Decimal("50.00")
    assert len(fake_mailer.sent) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redelivery_after_return_does_not_recapture(
    db_session, payments, order_service, fake_mailer
):
    """A refunded payment still counts as applied: the returned order stays returned."""
    _, order = await _pending_order_with_cart(db_session)
    order_id = order.id
    event = checkout_completed_event(order_id, amount_total=5000)

    assert await payments.handle_payment_event(event) is True
    await order_service.update_order_status(order_id, "returned")

    assert await payments.handle_payment_event(event) is False

    await db_session.refresh(order)
    assert order.status == OrderStatus.RETURNED
    assert order.total_paid == Decimal("50.00")
    statuses = (
        await db_session.scalars(select(Payment.status).where(Payment.order_id == order_id))
    ).all()
    assert statuses == [PaymentStatus.REFUNDED]
    assert fake_mailer.templates().count("order_confirmation") == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_known_transaction_is_not_captured_twice(db_session, payments):
    _, order = await _pending_order_with_cart(db_session)
    order_id = order.id
    payment = PaymentFactory.create(
        order_id, transaction_id="pi_seen", status=PaymentStatus.FAILED
    )
    db_session.add(payment)
    await db_session.commit()

    event = checkout_completed_event(order_id, payment_intent="pi_seen")

    assert await payments.handle_payment_event(event) is False
    await db_session.refresh(order)
    assert order.status == OrderStatus.PENDING
    assert await _completed_payments(db_session, order_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_discount_and_promotion_code_are_recorded(
    db_session, payments, fake_stripe
):
    _, order = await _pending_order_with_cart(db_session, total=Decimal("100.00"))
    fake_stripe.promotion_codes["promo_123"] = "SUMMER20"
    event = checkout_completed_event(
        order.id,
        amount_total=8000,
        total_details={"amount_discount": 2000},
        discounts=[{"promotion_code": "promo_123"}],
    )

    await payments.handle_payment_event(event)

    await db_session.refresh(order)
    assert order.total == Decimal("80.00")
    assert order.total_paid == Decimal("80.00")
    assert order.discount_amount == Decimal("20.00")
    assert order.promotion_code == "SUMMER20"
    assert reconstruct_original_total(
        order.total, order.total_paid, order.discount_amount
    ) == Decimal("100.00")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_retrieved_session_takes_precedence(db_session, payments, fake_stripe):
    _, order = await _pending_order_with_cart(db_session)
    event = checkout_completed_event(order.id, amount_total=5000)
    session_id = event["data"]["object"]["id"]
    fake_stripe.sessions[session_id] = {
        **event["data"]["object"],
        "amount_total": 4500,
        "total_details": {"amount_discount": 500},
    }

    await payments.handle_payment_event(event)

    await db_session.refresh(order)
    assert order.total_paid == Decimal("45.00")
    assert order.discount_amount == Decimal("5.00")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_promotion_code_falls_back_to_metadata(
    db_session, payments
):
    _, order = await _pending_order_with_cart(db_session)
    event = checkout_completed_event(
        order.id,
        discounts=[{"promotion_code": "promo_missing"}],
    )

    await payments.handle_payment_event(event)

    await db_session.refresh(order)
    assert order.promotion_code is None

    _, other = await _pending_order_with_cart(db_session)
    event = checkout_completed_event(
        other.id, metadata={"orderId": str(other.id), "promotion_code": "WELCOME"}
    )
    await payments.handle_payment_event(event)
    await db_session.refresh(other)
    assert other.promotion_code == "WELCOME"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_other_event_types_are_ignored(db_session, payments):
    _, order = await _pending_order_with_cart(db_session)

    applied = await payments.handle_payment_event(
        {"type": "payment_intent.created", "data": {"object": {}}}
    )

    assert applied is False
    await db_session.refresh(order)
    assert order.status == OrderStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completion_event_without_order_id(payments):
    event = checkout_completed_event(uuid.uuid4(), metadata={})

    with pytest.raises(ValidationError):
        await payments.handle_payment_event(event)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completion_event_for_unknown_order(payments):
    with pytest.raises(NotFoundError):
        await payments.handle_payment_event(checkout_completed_event(uuid.uuid4()))


@pytest.mark.unit
def test_extract_discount_fallbacks():
    assert extract_discount({"total_details": {"amount_discount": 1250}}) == Decimal("12.50")
    assert extract_discount(
        {"total_details": {"breakdown": {"discounts": [{"amount_off": 300}]}}}
    ) == Decimal("3.00")
    assert extract_discount({"discounts": [{"coupon": {"amount_off": 700}}]}) == Decimal(
        "7.00"
    )
    assert extract_discount(
        {"discounts": [{"discount": {"coupon": {"amount_off": 150}}}]}
    ) == Decimal("1.50")
    assert extract_discount({"total_details": "garbage"}) == Decimal("0.00")
    assert extract_discount({}) == Decimal("0.00")


# ---------------------------------------------------------------------------
# refunds
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_refund_marks_payment_refunded(db_session, payments, fake_stripe):
    _, order = await _pending_order_with_cart(db_session)
    payment = PaymentFactory.create(order.id)
    db_session.add(payment)
    await db_session.commit()

    assert await payments.refund(payment) is True
    assert payment.status == PaymentStatus.REFUNDED
    assert fake_stripe.refunds == [payment.transaction_id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failed_refund_leaves_payment_completed(db_session, payments, fake_stripe):
    _, order = await _pending_order_with_cart(db_session)
    payment = PaymentFactory.create(order.id)
    db_session.add(payment)
    await db_session.commit()
    fake_stripe.failing_refunds.add(payment.transaction_id)

    assert await payments.refund(payment) is False

    await db_session.refresh(payment)
    assert payment.status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_refund_order_payments_refunds_each_row(db_session, payments, fake_stripe):
    _, order = await _pending_order_with_cart(db_session)
    ok = PaymentFactory.create(order.id, amount=Decimal("30.00"))
    declined = PaymentFactory.create(order.id, amount=Decimal("20.00"))
    no_reference = PaymentFactory.create(order.id, transaction_id=None)
    already = PaymentFactory.create(order.id, status=PaymentStatus.REFUNDED)
    db_session.add_all([ok, declined, no_reference, already])
    await db_session.commit()
    fake_stripe.failing_refunds.add(declined.transaction_id)

    refunded = await payments.refund_order_payments(order.id)

    assert refunded == Decimal("30.00")
    assert fake_stripe.refunds == [ok.transaction_id]
    await db_session.refresh(declined)
    await db_session.refresh(no_reference)
    assert declined.status == PaymentStatus.COMPLETED
    assert no_reference.status == PaymentStatus.COMPLETED
