"""Order status administration: commands and handler.

Fulfillment staff advance orders through the fulfillment stages and can
correct payment status by hand (e.g. cash collected on delivery). Customers
may cancel their own orders until they start processing.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ForbiddenError
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.order.payment import apply_payment_confirmation, apply_payment_failure
from storefront.order.repository import load_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_CUSTOMER_CANCELLABLE = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


@storefront.command(part_of="Order")
class AdvanceOrderStatus:
    order_number = String(required=True, max_length=20)
    status = String(required=True, choices=OrderStatus)


@storefront.command(part_of="Order")
class CancelOrder:
    order_number = String(required=True, max_length=20)
    customer_id = Identifier()  # Set when the customer cancels; absent for staff
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_number = String(required=True, max_length=20)
    status = String(required=True, choices=PaymentStatus)
    transaction_reference = String(max_length=255)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_number)
        previous = order.status

        order.advance_to(command.status)
        repo.add(order)

        logger.info(
            "order_status_changed",
            order_number=order.order_number,
            previous_status=previous,
            new_status=order.status,
        )

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_number)

        if command.customer_id:
            if str(order.customer_id) != str(command.customer_id):
                raise ForbiddenError({"order_number": ["Order does not belong to this customer"]})
            if order.status not in _CUSTOMER_CANCELLABLE:
                raise ValidationError({"status": [f"Orders that are {order.status} can no longer be cancelled"]})

        order.cancel(reason=command.reason)
        repo.add(order)

        logger.info("order_cancelled", order_number=order.order_number, reason=command.reason)

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_number)

        target = PaymentStatus(command.status)
        if target == PaymentStatus.COMPLETED:
            apply_payment_confirmation(order, command.transaction_reference)
        elif target == PaymentStatus.FAILED:
            apply_payment_failure(order, command.reason or "Marked as failed by staff")
        elif order.payment.status == PaymentStatus.FAILED.value:
            order.retry_payment()
            repo.add(order)
        elif order.payment.status == PaymentStatus.COMPLETED.value:
            raise ValidationError({"payment": ["A completed payment cannot be reopened"]})
