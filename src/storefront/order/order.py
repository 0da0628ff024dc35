"""Order aggregate (CQRS): a placed order with its frozen pricing snapshot.

Orders are created by checkout and never re-priced. Payment and fulfillment
progress are tracked on the same aggregate, and every stage the order reaches
is appended to its timeline (entries are never edited or removed).

State Machine:
    Pending → Confirmed → Processing → In transit → Delivered
    Pending → Processing (payment confirmed)
    Cancelled (from any state except Delivered)

Payment: pending → completed | failed, failed → pending (retry)
A charge captured after cancellation is recorded as completed, for refund.
"""

import secrets
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.checkout.pricing import round_money
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
from storefront.order.timeline import STAGES_BY_KEY, STATUS_TO_STAGE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    IN_TRANSIT = "In transit"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(Enum):
    PAYSTACK = "paystack"
    ON_DELIVERY = "on-delivery"


class EntryStatus(Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    UPCOMING = "upcoming"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.IN_TRANSIT, OrderStatus.CANCELLED},
    OrderStatus.IN_TRANSIT: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def generate_order_number():
    return f"ORD-{secrets.randbelow(10**10):010d}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary locked at checkout: never recomputed afterwards."""

    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="KES")


@storefront.value_object(part_of="Order")
class PaymentDetails:
    method = String(required=True, choices=PaymentMethod)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_reference = String(max_length=255)
    failure_reason = String(max_length=500)


@storefront.value_object(part_of="Order")
class ShippingDetails:
    """Who and where the order ships to, captured at checkout time."""

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=1000)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    name = String(required=True, max_length=255)
    image_url = String(max_length=1000)
    variant_options = Text()  # JSON object
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@storefront.entity(part_of="Order")
class TimelineEntry:
    stage_key = String(required=True, max_length=50)
    title = String(required=True, max_length=255)
    description = String(max_length=1000)
    status = String(choices=EntryStatus, default=EntryStatus.CURRENT.value)
    occurred_at = DateTime(required=True)
    sequence = Integer(default=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    address_id = Identifier()
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    payment = ValueObject(PaymentDetails)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_details = ValueObject(ShippingDetails)
    timeline = HasMany(TimelineEntry)
    voucher_code = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_balance(self):
        if self.pricing is None:
            return
        expected = max(
            round_money(0),
            round_money(self.pricing.subtotal)
            + round_money(self.pricing.shipping)
            + round_money(self.pricing.tax)
            - round_money(self.pricing.discount),
        )
        if round_money(self.pricing.total) != expected:
            raise ValidationError({"pricing": ["Order total does not match its pricing components"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        lines,
        pricing,
        payment_method,
        shipping_details,
        voucher_code=None,
        address_id=None,
    ):
        """Create a Pending order from checkout lines and a pricing snapshot.

        Args:
            lines: List of dicts with product_id, variant_id, name, image_url,
                variant_options, unit_price and quantity.
            pricing: The ``PricingSnapshot`` computed at checkout.
            shipping_details: Dict with name, email, phone and address.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            address_id=address_id,
            pricing=OrderPricing(**pricing.as_dict()),
            payment=PaymentDetails(method=payment_method, status=PaymentStatus.PENDING.value),
            status=OrderStatus.PENDING.value,
            shipping_details=ShippingDetails(**shipping_details),
            voucher_code=voucher_code,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(OrderItem(**line))

        order._record_stage("pending", occurred_at=now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=len(lines),
                total=order.pricing.total,
                currency=order.pricing.currency,
                payment_method=payment_method,
                voucher_code=voucher_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Timeline
    # -------------------------------------------------------------------
    def _record_stage(self, stage_key, title=None, occurred_at=None):
        template = STAGES_BY_KEY[stage_key]
        self.add_timeline(
            TimelineEntry(
                stage_key=stage_key,
                title=title or template.title,
                description=template.description,
                status=EntryStatus.CURRENT.value,
                occurred_at=occurred_at or datetime.now(UTC),
                sequence=len(self.timeline or []),
            )
        )

    @property
    def ordered_timeline(self):
        return sorted(self.timeline or [], key=lambda e: e.sequence or 0)

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    @property
    def is_paid(self):
        return self.payment is not None and self.payment.status == PaymentStatus.COMPLETED.value

    def confirm_payment(self, transaction_reference=None):
        """Mark payment completed. Returns False when it already was (duplicate notification)."""
        if self.is_paid:
            return False
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Cannot confirm payment for a cancelled order"]})

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.COMPLETED.value,
            transaction_reference=transaction_reference,
        )

        if OrderStatus(self.status) in (OrderStatus.PENDING, OrderStatus.CONFIRMED):
            self.status = OrderStatus.PROCESSING.value
            self._record_stage("processing", title="Payment Confirmed", occurred_at=now)

        self.updated_at = now

        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                transaction_reference=transaction_reference,
                order_status=self.status,
                amount=self.pricing.total,
                confirmed_at=now,
            )
        )
        return True

    def record_payment_after_cancellation(self, transaction_reference=None):
        """Keep a charge captured after cancellation on record so it can be refunded.

        The order stays Cancelled. Returns False when the charge is already recorded.
        """
        if self.is_paid:
            return False
        if OrderStatus(self.status) != OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Only cancelled orders hold charges for refund"]})

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.COMPLETED.value,
            transaction_reference=transaction_reference,
        )
        self.updated_at = now

        self.raise_(
            PaymentReceivedAfterCancellation(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                transaction_reference=transaction_reference,
                amount=self.pricing.total,
                received_at=now,
            )
        )
        return True

    def record_payment_failure(self, reason=None):
        """Mark payment failed. A completed payment is never downgraded."""
        if self.is_paid:
            return False

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.FAILED.value,
            transaction_reference=self.payment.transaction_reference,
            failure_reason=reason,
        )
        self.updated_at = now

        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                failed_at=now,
            )
        )
        return True

    def retry_payment(self):
        """Re-open a failed payment so the customer can try the gateway again."""
        if self.payment.status != PaymentStatus.FAILED.value:
            raise ValidationError({"payment": ["Only failed payments can be retried"]})
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Cannot retry payment for a cancelled order"]})

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.PENDING.value,
            transaction_reference=self.payment.transaction_reference,
        )
        self.updated_at = now

        self.raise_(PaymentRetried(order_id=str(self.id), order_number=self.order_number, retried_at=now))

    # -------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def advance_to(self, new_status):
        target = OrderStatus(new_status)
        if target == OrderStatus.CANCELLED:
            self.cancel(reason="Cancelled by administrator")
            return

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        stage_key = STATUS_TO_STAGE[target.value]
        # Confirmed shares the "pending" stage, which is already on the timeline
        if stage_key not in {e.stage_key for e in self.timeline or []}:
            self._record_stage(stage_key, occurred_at=now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def cancel(self, reason=None):
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self._record_stage("cancelled", occurred_at=now)
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                reason=reason,
                cancelled_at=now,
            )
        )
