"""FastAPI routes for store administration: orders, vouchers, catalogue, locations and analytics.

Authentication and role checks happen in front of this router.
"""

import json

from fastapi import APIRouter
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddVariantRequest,
    AdjustStockRequest,
    AdminOrderSummaryResponse,
    AdminVoucherResponse,
    AdvanceOrderStatusRequest,
    AnalyticsResponse,
    CreateCityRequest,
    CreateCountryRequest,
    CreateCountyRequest,
    CreateProductRequest,
    CreateVoucherRequest,
    DailyRevenueSchema,
    IdResponse,
    StatusResponse,
    UpdateCityRequest,
    UpdatePaymentStatusRequest,
    UpdateVoucherRequest,
)
from storefront.catalogue.management import AddProductVariant, AdjustStock, CreateProduct
from storefront.catalogue.product import Product
from storefront.checkout.pricing import round_money
from storefront.location.management import CreateCity, CreateCountry, CreateCounty, UpdateCity
from storefront.order.status import AdvanceOrderStatus, UpdatePaymentStatus
from storefront.projections.daily_order_stats import stats_since
from storefront.projections.order_summary import OrderSummary
from storefront.voucher.management import CreateVoucher, DeleteVoucher, UpdateVoucher
from storefront.voucher.voucher import Voucher

admin_router = APIRouter(prefix="/admin", tags=["admin"])

RECENT_ORDERS = 5
MAX_ANALYTICS_DAYS = 90


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def _admin_summary(summary) -> AdminOrderSummaryResponse:
    return AdminOrderSummaryResponse(
        order_number=summary.order_number,
        customer_id=str(summary.customer_id),
        status=summary.status,
        payment_method=summary.payment_method,
        payment_status=summary.payment_status,
        item_count=summary.item_count or 0,
        total=summary.total,
        currency=summary.currency,
        created_at=summary.created_at,
    )


def _newest_first(records):
    return sorted(records, key=lambda r: r.created_at, reverse=True)


@admin_router.get("/orders", response_model=list[AdminOrderSummaryResponse])
async def list_orders(status: str | None = None) -> list[AdminOrderSummaryResponse]:
    """Every order, newest first. ``status`` filters by order status; "all" means no filter."""
    query = current_domain.repository_for(OrderSummary)._dao.query
    if status and status != "all":
        query = query.filter(status=status)
    return [_admin_summary(s) for s in _newest_first(query.all().items)]


@admin_router.put("/orders/{order_number}/status", response_model=StatusResponse)
async def advance_order_status(order_number: str, body: AdvanceOrderStatusRequest) -> StatusResponse:
    command = AdvanceOrderStatus(order_number=order_number, status=body.status)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/orders/{order_number}/payment", response_model=StatusResponse)
async def update_payment_status(order_number: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    command = UpdatePaymentStatus(
        order_number=order_number,
        status=body.status,
        transaction_reference=body.transaction_reference,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Vouchers
# ---------------------------------------------------------------------------
@admin_router.get("/vouchers", response_model=list[AdminVoucherResponse])
async def list_vouchers() -> list[AdminVoucherResponse]:
    vouchers = current_domain.repository_for(Voucher)._dao.query.all().items
    return [
        AdminVoucherResponse(
            id=str(v.id),
            code=v.code,
            discount_type=v.discount_type,
            discount_value=v.discount_value,
            expires_at=v.expires_at,
            is_active=bool(v.is_active),
            created_at=v.created_at,
        )
        for v in _newest_first(vouchers)
    ]


@admin_router.post("/vouchers", status_code=201, response_model=IdResponse)
async def create_voucher(body: CreateVoucherRequest) -> IdResponse:
    result = current_domain.process(CreateVoucher(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)


@admin_router.put("/vouchers/{voucher_id}", response_model=StatusResponse)
async def update_voucher(voucher_id: str, body: UpdateVoucherRequest) -> StatusResponse:
    command = UpdateVoucher(voucher_id=voucher_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.delete("/vouchers/{voucher_id}", response_model=StatusResponse)
async def delete_voucher(voucher_id: str) -> StatusResponse:
    current_domain.process(DeleteVoucher(voucher_id=voucher_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@admin_router.post("/products", status_code=201, response_model=IdResponse)
async def create_product(body: CreateProductRequest) -> IdResponse:
    result = current_domain.process(CreateProduct(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)


@admin_router.post("/products/{product_id}/variants", status_code=201, response_model=IdResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> IdResponse:
    command = AddProductVariant(
        product_id=product_id,
        price=body.price,
        stock=body.stock,
        options=json.dumps(body.options),
        sku=body.sku,
        image_url=body.image_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@admin_router.post("/products/{product_id}/stock", response_model=StatusResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest) -> StatusResponse:
    command = AdjustStock(
        product_id=product_id,
        variant_id=body.variant_id,
        quantity_change=body.quantity_change,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------
@admin_router.post("/locations/countries", status_code=201, response_model=IdResponse)
async def create_country(body: CreateCountryRequest) -> IdResponse:
    result = current_domain.process(CreateCountry(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)


@admin_router.post("/locations/counties", status_code=201, response_model=IdResponse)
async def create_county(body: CreateCountyRequest) -> IdResponse:
    result = current_domain.process(CreateCounty(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)


@admin_router.post("/locations/cities", status_code=201, response_model=IdResponse)
async def create_city(body: CreateCityRequest) -> IdResponse:
    result = current_domain.process(CreateCity(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)


@admin_router.put("/locations/cities/{city_id}", response_model=StatusResponse)
async def update_city(city_id: str, body: UpdateCityRequest) -> StatusResponse:
    command = UpdateCity(city_id=city_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
@admin_router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(days: int = 30) -> AnalyticsResponse:
    """Sales figures for the last ``days`` days: window totals plus the daily series behind them."""
    if not 1 <= days <= MAX_ANALYTICS_DAYS:
        raise ValidationError({"days": [f"Must be between 1 and {MAX_ANALYTICS_DAYS}"]})

    window = stats_since(days)
    active_products = current_domain.repository_for(Product)._dao.query.filter(is_active=True).all().total
    recent = _newest_first(current_domain.repository_for(OrderSummary)._dao.query.all().items)[:RECENT_ORDERS]

    return AnalyticsResponse(
        total_revenue=float(round_money(sum(d.revenue or 0.0 for d in window))),
        total_sales=sum(d.orders_paid or 0 for d in window),
        orders_placed=sum(d.orders_placed or 0 for d in window),
        orders_cancelled=sum(d.orders_cancelled or 0 for d in window),
        active_products=active_products,
        revenue_over_time=[
            DailyRevenueSchema(
                date=d.date,
                orders_placed=d.orders_placed or 0,
                orders_paid=d.orders_paid or 0,
                orders_cancelled=d.orders_cancelled or 0,
                revenue=d.revenue or 0.0,
            )
            for d in window
        ],
        recent_orders=[_admin_summary(s) for s in recent],
    )
