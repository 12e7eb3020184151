"""
Stripe API client for hosted checkout, refunds and promotion codes.

Talks to the Stripe REST API directly with httpx. Stripe expects
form-encoded request bodies with bracketed keys for nested values, e.g.
``line_items[0][price_data][currency]=eur``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """Hosted checkout session created for an order."""

    id: str
    url: str


def encode_form(data: dict, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested dicts/lists into Stripe's bracketed form fields."""
    fields: list[tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            fields.extend(encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, dict):
                    fields.extend(encode_form(item, item_name))
                else:
                    fields.append((item_name, _scalar(item)))
        else:
            fields.append((name, _scalar(value)))
    return fields


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class StripeClient:
    """Async client for the Stripe Checkout and Refunds APIs."""

    def __init__(
        self,
        secret_key: str = None,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY
        self.base_url = (base_url or settings.STRIPE_API_BASE).rstrip("/")
        self.timeout = timeout or settings.STRIPE_TIMEOUT_SECONDS
        self._transport = transport
        self._headers = {"Authorization": f"Bearer {self.secret_key}"}

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: list = None,
        form_data: dict = None,
    ) -> dict:
        """Make an async request to the Stripe API."""
        if not self.secret_key:
            raise ProviderError("STRIPE_SECRET_KEY is not configured")
        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    data=encode_form(form_data) if form_data else None,
                )
        except httpx.HTTPError as e:
            logger.error("Stripe request %s %s failed: %s", method, endpoint, e)
            raise ProviderError(f"Payment provider unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            logger.error("Stripe API error: %s - %s", response.status_code, data)
            error = data.get("error") or {}
            raise ProviderError(
                error.get("message", "Unknown Stripe error"),
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Checkout
    # =========================================================================

    async def create_checkout_session(
        self,
        *,
        amount_minor: int,
        currency: str,
        product_name: str,
        success_url: str,
        cancel_url: str,
        metadata: dict,
        allow_promotion_codes: bool = True,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session with a single line item.

        Args:
            amount_minor: Amount in the currency's minor unit (cents)
            currency: ISO4217 code, lowercase
            product_name: Label shown on the hosted page
            success_url / cancel_url: Redirect targets
            metadata: Echoed back on the completion event

        Raises:
            ProviderError: If the session cannot be created
        """
        data = await self._request(
            "POST",
            "/checkout/sessions",
            form_data={
                "mode": "payment",
                "line_items": [
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": product_name},
                            "unit_amount": amount_minor,
                        },
                        "quantity": 1,
                    }
                ],
                "success_url": success_url,
                "cancel_url": cancel_url,
                "allow_promotion_codes": allow_promotion_codes,
                "metadata": metadata,
            },
        )
        return CheckoutSession(id=data["id"], url=data["url"])

    async def retrieve_checkout_session(self, session_id: str) -> dict:
        """Fetch a checkout session with its discount breakdown expanded."""
        return await self._request(
            "GET",
            f"/checkout/sessions/{session_id}",
            params=[
                ("expand[]", "total_details.breakdown"),
                ("expand[]", "discounts.promotion_code"),
            ],
        )

    # =========================================================================
    # Refunds & promotions
    # =========================================================================

    async def create_refund(self, payment_intent: str) -> dict:
        """Refund the full captured amount of a payment intent."""
        return await self._request(
            "POST", "/refunds", form_data={"payment_intent": payment_intent}
        )

    async def retrieve_promotion_code(self, promotion_code_id: str) -> dict:
        return await self._request("GET", f"/promotion_codes/{promotion_code_id}")
