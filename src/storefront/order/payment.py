"""Order payment: commands and handler.

Handles the payment lifecycle of a placed order: opening a gateway checkout
session, confirming or failing the payment, and retrying after a failure.

Confirmation is idempotent: gateways and relays deliver notifications more
than once, and only the first one changes the order and clears the cart.
A gateway charge that lands on a cancelled order is acknowledged and kept
on record for refund rather than refused.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.pricing import to_minor_units
from storefront.domain import storefront
from storefront.errors import ExternalServiceError
from storefront.order.order import Order, OrderStatus, PaymentMethod
from storefront.order.repository import load_order
from storefront.payment.gateway import get_gateway
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class InitializePayment:
    order_number = String(required=True, max_length=20)


@storefront.command(part_of="Order")
class ConfirmPayment:
    order_number = String(required=True, max_length=20)
    transaction_reference = String(max_length=255)


@storefront.command(part_of="Order")
class RecordPaymentFailure:
    order_number = String(required=True, max_length=20)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class RetryPayment:
    order_number = String(required=True, max_length=20)


@storefront.command(part_of="Order")
class SettleCharge:
    """A successful charge reported by the gateway."""

    order_number = String(required=True, max_length=20)
    transaction_reference = String(max_length=255)


@storefront.command(part_of="Order")
class VerifyPayment:
    """Ask the gateway for the outcome of a transaction and reconcile the order with it."""

    order_number = String(required=True, max_length=20)
    transaction_reference = String(max_length=255)


def apply_payment_confirmation(order, transaction_reference=None):
    """Complete an order's payment. Returns False for a duplicate confirmation."""
    repo = current_domain.repository_for(Order)

    if not order.confirm_payment(transaction_reference=transaction_reference):
        logger.info("payment_already_confirmed", order_number=order.order_number)
        return False
    repo.add(order)

    cart_repo = current_domain.repository_for(ShoppingCart)
    cart = cart_repo.for_owner(customer_id=order.customer_id)
    if cart is not None:
        cart.clear(reason=f"Paid for by order {order.order_number}")
        cart_repo.add(cart)

    logger.info(
        "payment_confirmed",
        order_number=order.order_number,
        transaction_reference=transaction_reference,
    )
    return True


def settle_charge(order, transaction_reference=None):
    """Reconcile a captured charge. Returns "ok", "duplicate" or "cancelled"."""
    if OrderStatus(order.status) != OrderStatus.CANCELLED:
        return "ok" if apply_payment_confirmation(order, transaction_reference) else "duplicate"

    if not order.record_payment_after_cancellation(transaction_reference=transaction_reference):
        return "duplicate"
    current_domain.repository_for(Order).add(order)

    logger.warning(
        "refund_required",
        order_number=order.order_number,
        transaction_reference=transaction_reference,
        amount=order.pricing.total,
    )
    return "cancelled"


def apply_payment_failure(order, reason=None):
    repo = current_domain.repository_for(Order)

    if not order.record_payment_failure(reason=reason):
        logger.info("payment_failure_ignored", order_number=order.order_number, reason=reason)
        return False
    repo.add(order)

    logger.warning("payment_failed", order_number=order.order_number, reason=reason)
    return True


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(InitializePayment)
    def initialize_payment(self, command):
        order = load_order(command.order_number)

        if order.payment.method != PaymentMethod.PAYSTACK.value:
            raise ValidationError({"payment": ["This order is paid on delivery"]})
        if order.is_paid:
            raise ValidationError({"payment": ["This order has already been paid"]})

        result = get_gateway().initialize_transaction(
            email=order.shipping_details.email,
            amount=to_minor_units(order.pricing.total),
            currency=order.pricing.currency,
            reference=order.order_number,
            metadata={"orderId": order.order_number},
        )
        if not result.success:
            logger.error(
                "payment_initialization_failed",
                order_number=order.order_number,
                reason=result.failure_reason,
            )
            raise ExternalServiceError({"payment": [result.failure_reason or "Could not start payment"]})

        return {
            "authorization_url": result.authorization_url,
            "access_code": result.access_code,
            "reference": result.reference,
        }

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order = load_order(command.order_number)
        return apply_payment_confirmation(order, command.transaction_reference)

    @handle(SettleCharge)
    def settle_gateway_charge(self, command):
        order = load_order(command.order_number)
        return settle_charge(order, command.transaction_reference)

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        order = load_order(command.order_number)
        return apply_payment_failure(order, command.reason)

    @handle(RetryPayment)
    def retry_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_number)
        order.retry_payment()
        repo.add(order)

    @handle(VerifyPayment)
    def verify_payment(self, command):
        order = load_order(command.order_number)
        if order.is_paid:
            return order.payment.status

        result = get_gateway().verify_transaction(command.transaction_reference or order.order_number)
        if result.succeeded:
            settle_charge(order, result.reference)
        elif result.failed:
            apply_payment_failure(order, result.gateway_response)

        return order.payment.status
