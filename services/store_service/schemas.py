"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = 1


class CartItemUpdate(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    price: Decimal
    quantity: int
    stock: int
    image_url: Optional[str] = None
    subtotal: Decimal


class CartResponse(BaseModel):
    cart_id: uuid.UUID
    items: list[CartLineResponse] = []
    total: Decimal


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address_id: Optional[uuid.UUID] = None
    frontend_url: Optional[str] = Field(None, alias="frontendUrl")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    url: str


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderAddress(BaseModel):
    id: uuid.UUID
    full_name: str
    street: str
    city: str
    province: Optional[str] = None
    postal_code: str
    country: str
    phone: Optional[str] = None


class OrderItemResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    price: Decimal
    image_url: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    sku: Optional[str] = None


class OrderResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    status: str
    status_label: str
    total: Decimal  # Pre-discount display total
    total_paid: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    promotion_code: Optional[str] = None
    tracking_number: Optional[str] = None
    address: Optional[OrderAddress] = None
    items: list[OrderItemResponse] = []
    created_at: datetime
    updated_at: datetime


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    tracking_number: Optional[str] = Field(None, alias="trackingNumber")


class OrderStatusUpdated(BaseModel):
    message: str
    status: str


class CancelOrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    refunded_amount: Decimal = Field(..., alias="refundedAmount")


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# RETURN SCHEMAS
# ============================================================================


class ReturnCreate(BaseModel):
    reason: str = Field(..., max_length=2000)


class ReturnCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    return_id: uuid.UUID = Field(..., alias="returnId")


class ReturnStatusUpdate(BaseModel):
    status: str


class ReturnResponse(BaseModel):
    id: uuid.UUID
    order_id: uuid.UUID
    user_id: str
    reason: str
    total_amount: Optional[Decimal] = None
    status: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# DASHBOARD SCHEMAS
# ============================================================================


class DashboardOverview(BaseModel):
    total_sales: Decimal
    total_orders: int
    paid_orders: int
    avg_order_value: Decimal
    paying_customers: int
    total_users: int


class StatusCount(BaseModel):
    status: str
    status_label: str
    count: int


class RecentOrder(BaseModel):
    id: uuid.UUID
    user_id: str
    total: Decimal
    status: str
    status_label: str
    created_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None


class TopProduct(BaseModel):
    product_id: uuid.UUID
    product_name: str
    image_url: Optional[str] = None
    total_quantity: int
    total_revenue: Decimal


class ReturnsSummary(BaseModel):
    status: str
    count: int
    total_amount: Decimal


# ============================================================================
# ADDRESS SCHEMAS
# ============================================================================


class AddressBase(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    type: str = Field("shipping", max_length=20)


class AddressCreate(AddressBase):
    pass


class AddressUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    street: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    type: Optional[str] = Field(None, max_length=20)


class AddressResponse(AddressBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=100)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    sku: Optional[str] = Field(None, max_length=100)


class ProductResponse(ProductBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """Paginated product list."""

    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# ============================================================================
# NOTIFICATION SCHEMAS
# ============================================================================


class NotificationCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class NotificationSent(BaseModel):
    message: str
    delivered: int
