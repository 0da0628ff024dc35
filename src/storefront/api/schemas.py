"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class NewAddressSchema(BaseModel):
    recipient_name: str
    phone: str
    street_address: str
    country_id: str
    county_id: str
    city_id: str
    is_default: bool = False


class CartItemSchema(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    name: str
    image_url: str | None = None
    unit_price: float
    variant_options: dict = Field(default_factory=dict)
    quantity: int


class TimelineStageSchema(BaseModel):
    key: str
    title: str
    description: str
    status: str
    occurred_at: str | None = None


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "session_id": None,
                }
            ]
        }
    }


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=0)


class MergeGuestCartRequest(BaseModel):
    customer_id: str
    session_id: str


class CartResponse(BaseModel):
    cart_id: str
    customer_id: str | None = None
    session_id: str | None = None
    items: list[CartItemSchema]
    subtotal: float


class CartIdResponse(BaseModel):
    cart_id: str


class ItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Address Schemas
# ---------------------------------------------------------------------------
class AddAddressRequest(NewAddressSchema):
    pass


class UpdateAddressRequest(BaseModel):
    recipient_name: str | None = None
    phone: str | None = None
    street_address: str | None = None
    country_id: str | None = None
    county_id: str | None = None
    city_id: str | None = None
    is_default: bool | None = None


class AddressResponse(BaseModel):
    address_id: str
    recipient_name: str
    phone: str
    street_address: str
    country_id: str
    county_id: str
    city_id: str
    is_default: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AddressIdResponse(BaseModel):
    address_id: str


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str
    customer_email: str
    address_id: str | None = None
    new_address: NewAddressSchema | None = None
    payment_method: Literal["paystack", "on-delivery"]
    voucher_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "customer_email": "jane@example.com",
                    "address_id": "addr-001",
                    "payment_method": "paystack",
                    "voucher_code": "SAVE10",
                }
            ]
        }
    }


class OrderNumberResponse(BaseModel):
    order_number: str


class OrderDetailResponse(BaseModel):
    order: dict
    timeline: list[TimelineStageSchema]


class OrderSummaryResponse(BaseModel):
    order_number: str
    status: str
    payment_method: str | None = None
    payment_status: str | None = None
    item_count: int
    total: float | None = None
    currency: str | None = None
    created_at: datetime | None = None


class CancelOrderRequest(BaseModel):
    customer_id: str | None = None
    reason: str | None = None


class VerifyPaymentRequest(BaseModel):
    reference: str | None = None


class PaymentInitializationResponse(BaseModel):
    authorization_url: str | None = None
    access_code: str | None = None
    reference: str | None = None


class PaymentStatusResponse(BaseModel):
    order_number: str
    status: str  # pending, completed, failed or processing
    attempts: int | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Admin Schemas
# ---------------------------------------------------------------------------
class AdvanceOrderStatusRequest(BaseModel):
    status: Literal["Pending", "Confirmed", "Processing", "In transit", "Delivered", "Cancelled"]


class UpdatePaymentStatusRequest(BaseModel):
    status: Literal["pending", "completed", "failed"]
    transaction_reference: str | None = None
    reason: str | None = None


class CreateVoucherRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    discount_type: Literal["percentage", "fixed"]
    discount_value: float = Field(ge=0)
    expires_at: datetime | None = None
    is_active: bool = True


class UpdateVoucherRequest(BaseModel):
    discount_type: Literal["percentage", "fixed"] | None = None
    discount_value: float | None = Field(default=None, ge=0)
    expires_at: datetime | None = None
    clear_expiry: bool = False
    is_active: bool | None = None


class VoucherResponse(BaseModel):
    code: str
    discount_type: str
    discount_value: float


class AdminVoucherResponse(BaseModel):
    id: str
    code: str
    discount_type: str
    discount_value: float
    expires_at: datetime | None = None
    is_active: bool
    created_at: datetime | None = None


class AdminOrderSummaryResponse(OrderSummaryResponse):
    customer_id: str


class DailyRevenueSchema(BaseModel):
    date: str
    orders_placed: int
    orders_paid: int
    orders_cancelled: int
    revenue: float


class AnalyticsResponse(BaseModel):
    total_revenue: float
    total_sales: int
    orders_placed: int
    orders_cancelled: int
    active_products: int
    revenue_over_time: list[DailyRevenueSchema]
    recent_orders: list[AdminOrderSummaryResponse]


class CreateProductRequest(BaseModel):
    name: str
    slug: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    description: str | None = None
    image_url: str | None = None


class AddVariantRequest(BaseModel):
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    options: dict = Field(default_factory=dict)
    sku: str | None = None
    image_url: str | None = None


class AdjustStockRequest(BaseModel):
    quantity_change: int
    variant_id: str | None = None


class CreateCountryRequest(BaseModel):
    name: str
    code: str | None = None


class CreateCountyRequest(BaseModel):
    country_id: str
    name: str


class CreateCityRequest(BaseModel):
    county_id: str
    name: str
    delivery_fee: float = Field(ge=0, default=0.0)


class UpdateCityRequest(BaseModel):
    delivery_fee: float | None = Field(default=None, ge=0)
    is_active: bool | None = None


class LocationResponse(BaseModel):
    id: str
    name: str
    delivery_fee: float | None = None


class IdResponse(BaseModel):
    id: str


class StatusResponse(BaseModel):
    status: str = "ok"
