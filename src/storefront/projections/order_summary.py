"""Order summary: lightweight order history view per customer."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    PaymentFailed,
    PaymentReceivedAfterCancellation,
    PaymentRetried,
)
from storefront.order.order import Order


@storefront.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    status = String(required=True)
    payment_method = String(max_length=50)
    payment_status = String(max_length=20)
    item_count = Integer(default=0)
    total = Float()
    currency = String(default="KES")
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                status="Pending",
                payment_method=event.payment_method,
                payment_status="pending",
                item_count=event.item_count,
                total=event.total,
                currency=event.currency or "KES",
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at=None, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        for field_name, value in changes.items():
            setattr(summary, field_name, value)
        if updated_at:
            summary.updated_at = updated_at
        repo.add(summary)

    @on(PaymentConfirmed)
    def on_payment_confirmed(self, event):
        self._update(
            event.order_id,
            event.confirmed_at,
            payment_status="completed",
            status=event.order_status,
        )

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        self._update(event.order_id, event.failed_at, payment_status="failed")

    @on(PaymentRetried)
    def on_payment_retried(self, event):
        self._update(event.order_id, event.retried_at, payment_status="pending")

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        self._update(event.order_id, event.changed_at, status=event.new_status)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.cancelled_at, status="Cancelled")

    @on(PaymentReceivedAfterCancellation)
    def on_payment_received_after_cancellation(self, event):
        self._update(event.order_id, event.received_at, payment_status="completed")
