"""Order placement: turns a customer's cart into a Pending order.

Placement runs in one unit of work:
    1. resolve the delivery address (saved, or created from the request)
    2. load the cart and re-check stock for every line
    3. validate the voucher, if one was supplied
    4. price the order with the destination city's delivery fee
    5. persist the order with its first timeline entry

Orders paid on delivery clear the cart straight away. Orders paid through
the gateway keep the cart until the payment is confirmed, so a declined
payment leaves it intact.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.address.address import load_owned_address
from storefront.address.book import add_address
from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.checkout.pricing import PricingLine, calculate_pricing, to_decimal
from storefront.domain import storefront
from storefront.errors import EmptyCartError, OutOfStockError
from storefront.location.location import deliverable_city
from storefront.order.order import Order, PaymentMethod, generate_order_number
from storefront.utils.logging import get_logger
from storefront.voucher.validation import validate_voucher

logger = get_logger(__name__)

NEW_ADDRESS_FIELDS = ("recipient_name", "phone", "street_address", "country_id", "county_id", "city_id")
_ORDER_NUMBER_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_email = String(required=True, max_length=255)
    address_id = Identifier()
    new_address = Text()  # JSON object with NEW_ADDRESS_FIELDS
    payment_method = String(required=True, choices=PaymentMethod)
    voucher_code = String(max_length=50)


def resolve_address(customer_id, address_id=None, new_address=None):
    """The saved address to ship to, creating it first when details are given inline."""
    if address_id:
        return load_owned_address(address_id, customer_id)

    details = new_address or {}
    missing = [name for name in NEW_ADDRESS_FIELDS if not details.get(name)]
    if missing:
        raise ValidationError({name: ["This field is required for a new address"] for name in missing})

    return add_address(
        customer_id=customer_id,
        is_default=bool(details.get("is_default", False)),
        **{name: details[name] for name in NEW_ADDRESS_FIELDS},
    )


def checkout_lines(cart):
    """Order lines for every cart item, priced from the catalogue, after a stock check."""
    products = current_domain.repository_for(Product)
    lines = []
    offenders = []

    for item in cart.items:
        try:
            product = products.get(item.product_id)
            available = product.available_stock(item.variant_id) if product.is_active else 0
            unit_price = product.price_for(item.variant_id)
        except (ObjectNotFoundError, ValidationError):
            available, unit_price = 0, item.unit_price

        if item.quantity > available:
            offenders.append({"name": item.name, "requested": item.quantity, "available": available})
            continue

        lines.append(
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id) if item.variant_id else None,
                "name": item.name,
                "image_url": item.image_url,
                "variant_options": item.variant_options,
                "unit_price": unit_price,
                "quantity": item.quantity,
            }
        )

    if offenders:
        raise OutOfStockError(offenders)
    return lines


def _unused_order_number(repo):
    for _ in range(_ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if repo.find_by_order_number(candidate) is None:
            return candidate
    raise RuntimeError("Could not allocate a unique order number")


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        new_address = json.loads(command.new_address) if command.new_address else None
        address = resolve_address(command.customer_id, command.address_id, new_address)

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_owner(customer_id=command.customer_id)
        if cart is None or cart.is_empty:
            raise EmptyCartError()

        lines = checkout_lines(cart)
        voucher = validate_voucher(command.voucher_code) if command.voucher_code else None
        city = deliverable_city(address.city_id)

        pricing = calculate_pricing(
            [PricingLine(unit_price=to_decimal(line["unit_price"]), quantity=line["quantity"]) for line in lines],
            shipping_fee=city.delivery_fee or 0,
            voucher=voucher,
        )

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=_unused_order_number(order_repo),
            customer_id=command.customer_id,
            lines=lines,
            pricing=pricing,
            payment_method=command.payment_method,
            shipping_details={
                "name": address.recipient_name,
                "email": command.customer_email,
                "phone": address.phone,
                "address": address.format_line(city.name),
            },
            voucher_code=voucher.code if voucher else None,
            address_id=str(address.id),
        )
        order_repo.add(order)

        if command.payment_method == PaymentMethod.ON_DELIVERY.value:
            cart.clear(reason=f"Placed as order {order.order_number}")
            cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            payment_method=command.payment_method,
            total=order.pricing.total,
        )
        return order.order_number
