"""Cart management: commands and handlers.

Handles cart creation, item changes, clearing and guest cart merging. Item
details (name, price, image, options) are snapshotted from the catalogue
when a product is added.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import OutOfStockError


@storefront.command(part_of="ShoppingCart")
class CreateCart:
    """Create a new shopping cart for a registered customer or guest session."""

    customer_id = Identifier()  # Optional for guest carts
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Merge a guest session cart into a registered customer's cart."""

    customer_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)

        # One cart per owner: hand back the existing one
        existing = repo.for_owner(customer_id=command.customer_id, session_id=command.session_id)
        if existing is not None:
            return str(existing.id)

        cart = ShoppingCart.create(
            customer_id=command.customer_id,
            session_id=command.session_id,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        product = current_domain.repository_for(Product).get(command.product_id)

        already_in_cart = sum(i.quantity for i in cart.items if i.matches(command.product_id, command.variant_id))
        available = product.available_stock(command.variant_id)
        if already_in_cart + command.quantity > available:
            raise OutOfStockError(
                [{"name": product.name, "requested": already_in_cart + command.quantity, "available": available}]
            )

        variant = product.find_variant(command.variant_id) if command.variant_id else None
        item_id = cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            name=product.name,
            unit_price=product.price_for(command.variant_id),
            quantity=command.quantity,
            image_url=(variant.image_url if variant and variant.image_url else product.image_url),
            variant_options=variant.option_map if variant else None,
        )
        repo.add(cart)
        return item_id

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.update_item_quantity(item_id=command.item_id, new_quantity=command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.clear(reason="Cleared by customer")
        repo.add(cart)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        guest_cart = repo.for_owner(session_id=command.session_id)

        cart = repo.for_owner(customer_id=command.customer_id)
        if cart is None:
            cart = ShoppingCart.create(customer_id=command.customer_id)

        if guest_cart is not None and not guest_cart.customer_id and not guest_cart.is_empty:
            cart.merge_guest_cart(guest_cart)
            guest_cart.clear(reason="Merged into customer cart")
            repo.add(guest_cart)

        repo.add(cart)
        return str(cart.id)
