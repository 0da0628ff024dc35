"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    price = Float(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(max_length=100)
    price = Float(required=True)
    stock = Integer(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock on hand changed for a product or one of its variants."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier()
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
