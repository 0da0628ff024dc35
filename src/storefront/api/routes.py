"""FastAPI routes for the Storefront: carts, addresses, checkout and orders."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.address.address import addresses_for
from storefront.address.book import AddAddress, RemoveAddress, UpdateAddress
from storefront.api.schemas import (
    AddAddressRequest,
    AddressIdResponse,
    AddressResponse,
    AddToCartRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartItemSchema,
    CartResponse,
    CreateCartRequest,
    ItemIdResponse,
    LocationResponse,
    MergeGuestCartRequest,
    OrderDetailResponse,
    OrderNumberResponse,
    OrderSummaryResponse,
    PaymentInitializationResponse,
    PaymentStatusResponse,
    PlaceOrderRequest,
    StatusResponse,
    TimelineStageSchema,
    UpdateAddressRequest,
    UpdateCartQuantityRequest,
    VerifyPaymentRequest,
    VoucherResponse,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.management import (
    AddToCart,
    ClearCart,
    CreateCart,
    MergeGuestCart,
    RemoveFromCart,
    UpdateCartQuantity,
)
from storefront.checkout.placement import PlaceOrder
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.errors import ForbiddenError
from storefront.location.location import City, Country, County
from storefront.order.document import to_order_document
from storefront.order.payment import InitializePayment, RetryPayment, VerifyPayment
from storefront.order.repository import load_order
from storefront.order.status import CancelOrder
from storefront.order.timeline import project_timeline
from storefront.payment.polling import poll_payment_status
from storefront.projections.order_summary import OrderSummary
from storefront.voucher.validation import validate_voucher


def _cart_response(cart) -> CartResponse:
    items = [
        CartItemSchema(
            item_id=str(item.id),
            product_id=str(item.product_id),
            variant_id=str(item.variant_id) if item.variant_id else None,
            name=item.name,
            image_url=item.image_url,
            unit_price=item.unit_price,
            variant_options=json.loads(item.variant_options) if item.variant_options else {},
            quantity=item.quantity,
        )
        for item in cart.items
    ]
    return CartResponse(
        cart_id=str(cart.id),
        customer_id=str(cart.customer_id) if cart.customer_id else None,
        session_id=cart.session_id,
        items=items,
        subtotal=round(sum(item.line_total for item in cart.items), 2),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(
        customer_id=body.customer_id,
        session_id=body.session_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.post("/merge", response_model=CartIdResponse)
async def merge_guest_cart(body: MergeGuestCartRequest) -> CartIdResponse:
    """Fold the guest session's cart into the customer's cart after sign-in."""
    command = MergeGuestCart(customer_id=body.customer_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return _cart_response(cart)


@cart_router.post("/{cart_id}/items", response_model=ItemIdResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> ItemIdResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=result)


@cart_router.put("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(cart_id: str, item_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(cart_id=cart_id, item_id=item_id, new_quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, item_id: str) -> StatusResponse:
    command = RemoveFromCart(cart_id=cart_id, item_id=item_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items", response_model=StatusResponse)
async def clear_cart(cart_id: str) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/customers/{customer_id}/addresses", tags=["addresses"])


@address_router.get("", response_model=list[AddressResponse])
async def list_addresses(customer_id: str) -> list[AddressResponse]:
    return [
        AddressResponse(
            address_id=str(a.id),
            recipient_name=a.recipient_name,
            phone=a.phone,
            street_address=a.street_address,
            country_id=str(a.country_id),
            county_id=str(a.county_id),
            city_id=str(a.city_id),
            is_default=bool(a.is_default),
            created_at=a.created_at,
            updated_at=a.updated_at,
        )
        for a in addresses_for(customer_id)
    ]


@address_router.post("", status_code=201, response_model=AddressIdResponse)
async def add_address(customer_id: str, body: AddAddressRequest) -> AddressIdResponse:
    command = AddAddress(customer_id=customer_id, **body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return AddressIdResponse(address_id=result)


@address_router.put("/{address_id}", response_model=StatusResponse)
async def update_address(customer_id: str, address_id: str, body: UpdateAddressRequest) -> StatusResponse:
    command = UpdateAddress(
        address_id=address_id,
        customer_id=customer_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@address_router.delete("/{address_id}", response_model=StatusResponse)
async def remove_address(customer_id: str, address_id: str) -> StatusResponse:
    command = RemoveAddress(address_id=address_id, customer_id=customer_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _owned_order(order_number, customer_id=None):
    order = load_order(order_number)
    if customer_id and str(order.customer_id) != str(customer_id):
        raise ForbiddenError({"order_number": ["Order does not belong to this customer"]})
    return order


@order_router.post("", status_code=201, response_model=OrderNumberResponse)
async def place_order(body: PlaceOrderRequest) -> OrderNumberResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        customer_email=body.customer_email,
        address_id=body.address_id,
        new_address=json.dumps(body.new_address.model_dump()) if body.new_address else None,
        payment_method=body.payment_method,
        voucher_code=body.voucher_code,
    )
    order_number = current_domain.process(command, asynchronous=False)
    return OrderNumberResponse(order_number=order_number)


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(customer_id: str) -> list[OrderSummaryResponse]:
    summaries = current_domain.repository_for(OrderSummary)._dao.query.filter(customer_id=customer_id).all().items
    summaries = sorted(summaries, key=lambda s: s.created_at, reverse=True)
    return [
        OrderSummaryResponse(
            order_number=s.order_number,
            status=s.status,
            payment_method=s.payment_method,
            payment_status=s.payment_status,
            item_count=s.item_count or 0,
            total=s.total,
            currency=s.currency,
            created_at=s.created_at,
        )
        for s in summaries
    ]


@order_router.get("/{order_number}", response_model=OrderDetailResponse)
async def get_order(order_number: str, customer_id: str | None = None) -> OrderDetailResponse:
    order = _owned_order(order_number, customer_id)
    timeline = project_timeline(order.status, order.ordered_timeline)
    return OrderDetailResponse(
        order=to_order_document(order),
        timeline=[TimelineStageSchema(**stage.as_dict()) for stage in timeline],
    )


@order_router.post("/{order_number}/payment/initialize", response_model=PaymentInitializationResponse)
async def initialize_payment(order_number: str) -> PaymentInitializationResponse:
    result = current_domain.process(InitializePayment(order_number=order_number), asynchronous=False)
    return PaymentInitializationResponse(**result)


@order_router.post("/{order_number}/payment/verify", response_model=PaymentStatusResponse)
async def verify_payment(order_number: str, body: VerifyPaymentRequest) -> PaymentStatusResponse:
    command = VerifyPayment(order_number=order_number, transaction_reference=body.reference)
    status = current_domain.process(command, asynchronous=False)
    return PaymentStatusResponse(order_number=order_number, status=status)


@order_router.get("/{order_number}/payment/status", response_model=PaymentStatusResponse)
def payment_status(order_number: str, wait: bool = False) -> PaymentStatusResponse:
    """Current payment status; with ``wait`` the call polls until the payment settles or the bound runs out."""
    # Sync route: runs in a worker thread, so bind the domain context here
    with storefront.domain_context():
        if not wait:
            return PaymentStatusResponse(order_number=order_number, status=load_order(order_number).payment.status)

        settings = get_settings()
        outcome = poll_payment_status(
            lambda: load_order(order_number).payment.status,
            max_attempts=settings.payment_poll_attempts,
            interval=settings.payment_poll_interval,
        )
        return PaymentStatusResponse(
            order_number=order_number,
            status=outcome.status,
            attempts=outcome.attempts,
            message=outcome.message,
        )


@order_router.post("/{order_number}/payment/retry", response_model=StatusResponse)
async def retry_payment(order_number: str) -> StatusResponse:
    current_domain.process(RetryPayment(order_number=order_number), asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_number}/cancel", response_model=StatusResponse)
async def cancel_order(order_number: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(order_number=order_number, customer_id=body.customer_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Voucher Router
# ---------------------------------------------------------------------------
voucher_router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@voucher_router.get("/{code}", response_model=VoucherResponse)
async def check_voucher(code: str) -> VoucherResponse:
    terms = validate_voucher(code)
    return VoucherResponse(
        code=terms.code,
        discount_type=terms.discount_type.value,
        discount_value=float(terms.discount_value),
    )


# ---------------------------------------------------------------------------
# Location Router
# ---------------------------------------------------------------------------
location_router = APIRouter(prefix="/locations", tags=["locations"])


@location_router.get("/countries", response_model=list[LocationResponse])
async def list_countries() -> list[LocationResponse]:
    countries = current_domain.repository_for(Country)._dao.query.all().items
    return [LocationResponse(id=str(c.id), name=c.name) for c in sorted(countries, key=lambda c: c.name)]


@location_router.get("/countries/{country_id}/counties", response_model=list[LocationResponse])
async def list_counties(country_id: str) -> list[LocationResponse]:
    counties = current_domain.repository_for(County)._dao.query.filter(country_id=country_id).all().items
    return [LocationResponse(id=str(c.id), name=c.name) for c in sorted(counties, key=lambda c: c.name)]


@location_router.get("/counties/{county_id}/cities", response_model=list[LocationResponse])
async def list_cities(county_id: str) -> list[LocationResponse]:
    cities = current_domain.repository_for(City)._dao.query.filter(county_id=county_id, is_active=True).all().items
    return [
        LocationResponse(id=str(c.id), name=c.name, delivery_fee=c.delivery_fee)
        for c in sorted(cities, key=lambda c: c.name)
    ]
