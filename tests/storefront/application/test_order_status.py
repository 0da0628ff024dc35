"""Application tests for fulfillment progress, cancellation and manual payment updates."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.errors import ForbiddenError
from storefront.order.order import OrderStatus, PaymentStatus
from storefront.order.repository import load_order
from storefront.order.status import AdvanceOrderStatus, CancelOrder, UpdatePaymentStatus
from storefront.order.timeline import StageStatus, project_timeline

CUSTOMER_ID = "cust-001"


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def order_number(product_id, add_to_cart, place_order):
    add_to_cart(product_id)
    return place_order(payment_method="on-delivery")


class TestAdvanceOrderStatus:
    def test_progression_to_delivery(self, order_number):
        for status in ("Processing", "In transit", "Delivered"):
            process(AdvanceOrderStatus(order_number=order_number, status=status))

        order = load_order(order_number)
        assert order.status == OrderStatus.DELIVERED.value
        stages = project_timeline(order.status, order.ordered_timeline)
        assert [s.status for s in stages] == [StageStatus.COMPLETED] * 3 + [StageStatus.CURRENT]
        assert all(s.occurred_at is not None for s in stages)

    def test_skipping_ahead_is_rejected(self, order_number):
        with pytest.raises(ValidationError):
            process(AdvanceOrderStatus(order_number=order_number, status="Delivered"))

        assert load_order(order_number).status == OrderStatus.PENDING.value

    def test_unknown_status_is_rejected_by_the_command(self, order_number):
        with pytest.raises(ValidationError):
            process(AdvanceOrderStatus(order_number=order_number, status="Lost"))

    def test_admin_cancellation_through_status(self, order_number):
        process(AdvanceOrderStatus(order_number=order_number, status="Processing"))
        process(AdvanceOrderStatus(order_number=order_number, status="Cancelled"))

        order = load_order(order_number)
        stages = project_timeline(order.status, order.ordered_timeline)
        assert [s.key for s in stages] == ["pending", "processing", "in-transit", "delivered", "cancelled"]
        assert [s.status for s in stages] == [
            StageStatus.COMPLETED,
            StageStatus.COMPLETED,
            StageStatus.SKIPPED,
            StageStatus.SKIPPED,
            StageStatus.CURRENT,
        ]


class TestCancelOrder:
    def test_customer_cancels_pending_order(self, order_number):
        process(CancelOrder(order_number=order_number, customer_id=CUSTOMER_ID, reason="Ordered twice"))

        assert load_order(order_number).status == OrderStatus.CANCELLED.value

    def test_customer_cannot_cancel_someone_elses_order(self, order_number):
        with pytest.raises(ForbiddenError):
            process(CancelOrder(order_number=order_number, customer_id="cust-999"))

    def test_customer_cannot_cancel_once_processing(self, order_number):
        process(AdvanceOrderStatus(order_number=order_number, status="Processing"))

        with pytest.raises(ValidationError):
            process(CancelOrder(order_number=order_number, customer_id=CUSTOMER_ID))

    def test_staff_can_cancel_processing_order(self, order_number):
        process(AdvanceOrderStatus(order_number=order_number, status="Processing"))

        process(CancelOrder(order_number=order_number, reason="Damaged in warehouse"))

        assert load_order(order_number).status == OrderStatus.CANCELLED.value


class TestUpdatePaymentStatus:
    def test_cash_collected_on_delivery(self, order_number):
        process(UpdatePaymentStatus(order_number=order_number, status="completed"))

        order = load_order(order_number)
        assert order.payment.status == PaymentStatus.COMPLETED.value
        assert order.status == OrderStatus.PROCESSING.value

    def test_mark_failed_then_pending_again(self, order_number):
        process(UpdatePaymentStatus(order_number=order_number, status="failed"))
        assert load_order(order_number).payment.failure_reason == "Marked as failed by staff"

        process(UpdatePaymentStatus(order_number=order_number, status="pending"))
        assert load_order(order_number).payment.status == PaymentStatus.PENDING.value

    def test_completed_payment_cannot_be_reopened(self, order_number):
        process(UpdatePaymentStatus(order_number=order_number, status="completed"))

        with pytest.raises(ValidationError):
            process(UpdatePaymentStatus(order_number=order_number, status="pending"))
