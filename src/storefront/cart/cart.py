"""Shopping Cart aggregate: the items a customer or guest intends to buy.

Each line snapshots the product name, image, unit price and variant options
at the time it was added so the cart renders without catalogue lookups.
Checkout re-reads stock from the catalogue; the cart never reserves it.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()  # Absent for products sold without variants
    name = String(required=True, max_length=255)
    image_url = String(max_length=1000)
    unit_price = Float(required=True, min_value=0.0)
    variant_options = Text()  # JSON object
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    def matches(self, product_id, variant_id):
        return str(self.product_id) == str(product_id) and str(self.variant_id or "") == str(variant_id or "")

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)  # For guest cart identification
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id=None, session_id=None):
        if not customer_id and not session_id:
            raise ValidationError({"cart": ["A cart needs a customer or a guest session"]})

        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_empty(self):
        return not self.items

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def add_item(self, product_id, name, unit_price, quantity=1, variant_id=None, image_url=None, variant_options=None):
        """Add an item to the cart (or increase quantity if already present)."""
        existing = next((i for i in self.items if i.matches(product_id, variant_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                name=name,
                image_url=image_url,
                unit_price=unit_price,
                variant_options=json.dumps(variant_options or {}),
                quantity=quantity,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                quantity=quantity,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, new_quantity):
        """Set a line's quantity; zero removes the line."""
        if new_quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})
        if new_quantity == 0:
            self.remove_item(item_id)
            return

        item = self._find_item(item_id)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        item = self._find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self, reason=None):
        """Drop every line. Clearing an already-empty cart is a no-op."""
        if self.is_empty:
            return

        items = list(self.items)
        for item in items:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=len(items), reason=reason))

    def merge_guest_cart(self, guest_cart):
        """Fold a guest cart's lines into this cart, summing duplicate quantities."""
        now = datetime.now(UTC)
        items_merged = 0

        for guest_item in guest_cart.items:
            existing = next(
                (i for i in self.items if i.matches(guest_item.product_id, guest_item.variant_id)),
                None,
            )
            if existing:
                existing.quantity += guest_item.quantity
            else:
                self.add_items(
                    CartItem(
                        product_id=guest_item.product_id,
                        variant_id=guest_item.variant_id,
                        name=guest_item.name,
                        image_url=guest_item.image_url,
                        unit_price=guest_item.unit_price,
                        variant_options=guest_item.variant_options,
                        quantity=guest_item.quantity,
                        added_at=now,
                    )
                )
            items_merged += 1

        self.updated_at = now

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_session_id=guest_cart.session_id,
                items_merged_count=items_merged,
            )
        )


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def for_owner(self, customer_id=None, session_id=None):
        """The cart belonging to a customer (or guest session), or None."""
        if customer_id:
            carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        elif session_id:
            carts = self._dao.query.filter(session_id=session_id).all().items
        else:
            return None

        if not carts:
            return None
        # Reload through the repository so HasMany items are attached
        return self.get(carts[0].id)


def cart_for_customer(customer_id):
    return current_domain.repository_for(ShoppingCart).for_owner(customer_id=customer_id)
