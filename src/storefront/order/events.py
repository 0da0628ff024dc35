"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer checked out; pricing is frozen and payment is pending."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(max_length=3)
    payment_method = String(required=True, max_length=50)
    voucher_code = String(max_length=50)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentConfirmed:
    """The gateway reported a successful charge for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    transaction_reference = String(max_length=255)
    order_status = String(required=True, max_length=50)
    amount = Float()
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentRetried:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    retried_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to another fulfillment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    previous_status = String(required=True, max_length=50)
    new_status = String(required=True, max_length=50)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    previous_status = String(required=True, max_length=50)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentReceivedAfterCancellation:
    """The gateway captured a charge for an order that was already cancelled; it must be refunded."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    transaction_reference = String(max_length=255)
    amount = Float()
    received_at = DateTime(required=True)
