"""The DailyOrderStats projection counts each day's orders and revenue."""

from datetime import UTC, date, datetime

import pytest
from protean import current_domain
from storefront.order.payment import ConfirmPayment, SettleCharge
from storefront.order.status import CancelOrder
from storefront.projections.daily_order_stats import DailyOrderStats, stats_since


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def order_number(product_id, add_to_cart, place_order):
    add_to_cart(product_id)
    return place_order()


def _today():
    return current_domain.repository_for(DailyOrderStats).get(datetime.now(UTC).date().isoformat())


def test_placement_is_counted(order_number):
    stats = _today()

    assert stats.orders_placed == 1
    assert stats.orders_paid == 0
    assert stats.revenue == 0.0


def test_confirmed_payment_adds_revenue(order_number):
    process(ConfirmPayment(order_number=order_number, transaction_reference="ref-1"))

    stats = _today()
    assert stats.orders_paid == 1
    assert stats.revenue == 1360.0


def test_charge_on_cancelled_order_is_not_revenue(order_number):
    process(CancelOrder(order_number=order_number, reason="Customer request"))
    process(SettleCharge(order_number=order_number, transaction_reference="ref-late"))

    stats = _today()
    assert stats.orders_cancelled == 1
    assert stats.orders_paid == 0
    assert stats.revenue == 0.0


def test_stats_since_keeps_the_window():
    repo = current_domain.repository_for(DailyOrderStats)
    for day in ("2026-03-01", "2026-03-08", "2026-03-10"):
        repo.add(DailyOrderStats(date=day, orders_placed=1, orders_paid=0, orders_cancelled=0, revenue=0.0))

    window = stats_since(7, today=date(2026, 3, 10))

    assert [s.date for s in window] == ["2026-03-08", "2026-03-10"]
