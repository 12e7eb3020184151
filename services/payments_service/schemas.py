"""Pydantic schemas for payments service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.payments_service.models import PaymentMethod, PaymentStatus


class CheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: uuid.UUID = Field(..., alias="orderId")
    frontend_url: str = Field(..., alias="frontendUrl", min_length=1)


class CheckoutSessionResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    transaction_id: Optional[str] = None
    amount: Decimal
    status: PaymentStatus
    method: PaymentMethod
    discount_amount: Decimal
    promotion_code: Optional[str] = None
    created_at: datetime
