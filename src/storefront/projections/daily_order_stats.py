"""Daily order stats projection: figures for the admin analytics dashboard.

Keeps per-day counts of orders placed, paid and cancelled, along with the
revenue from confirmed payments. Keyed by date (YYYY-MM-DD). Revenue is
counted on the day the payment is confirmed; charges that land on cancelled
orders are refunds in waiting and never count.
"""

from datetime import UTC, datetime, timedelta

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from storefront.checkout.pricing import round_money
from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced, PaymentConfirmed
from storefront.order.order import Order


@storefront.projection
class DailyOrderStats:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    orders_paid = Integer(default=0)
    orders_cancelled = Integer(default=0)
    revenue = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailyOrderStats)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailyOrderStats(date=date_key, orders_placed=0, orders_paid=0, orders_cancelled=0, revenue=0.0)


@storefront.projector(projector_for=DailyOrderStats, aggregates=[Order])
class DailyOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(PaymentConfirmed)
    def on_payment_confirmed(self, event):
        record = _get_or_create(event.confirmed_at.date().isoformat())
        record.orders_paid = (record.orders_paid or 0) + 1
        record.revenue = float(round_money((record.revenue or 0.0) + (event.amount or 0.0)))
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.cancelled_at.date().isoformat())
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)


def stats_since(days, today=None):
    """Daily stats for the last ``days`` days (today included), oldest first."""
    today = today or datetime.now(UTC).date()
    start = (today - timedelta(days=days - 1)).isoformat()
    records = (
        current_domain.repository_for(DailyOrderStats)
        ._dao.query.filter(date__gte=start, date__lte=today.isoformat())
        .all()
        .items
    )
    return sorted(records, key=lambda r: r.date)
