"""Product aggregate: the catalogue entries that carts and checkout read.

A product either sells as-is (its own price and stock) or through variants,
each carrying its own option map (size, colour, ...), price, stock and SKU.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.catalogue.events import ProductCreated, StockAdjusted, VariantAdded
from storefront.domain import storefront


@storefront.entity(part_of="Product")
class ProductVariant:
    options = Text()  # JSON object, e.g. {"Size": "M", "Color": "Red"}
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    sku = String(max_length=100)
    image_url = String(max_length=1000)

    @property
    def option_map(self):
        return json.loads(self.options) if self.options else {}


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    image_url = String(max_length=1000)
    is_active = Boolean(default=True)
    variants = HasMany(ProductVariant)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, slug, price, stock=0, description=None, image_url=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            slug=slug,
            description=description,
            price=price,
            stock=stock,
            image_url=image_url,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=name,
                slug=slug,
                price=price,
            )
        )
        return product

    def add_variant(self, price, stock=0, options=None, sku=None, image_url=None):
        variant = ProductVariant(
            options=json.dumps(options or {}),
            price=price,
            stock=stock,
            sku=sku,
            image_url=image_url,
        )
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                sku=sku,
                price=price,
                stock=stock,
            )
        )
        return variant

    def find_variant(self, variant_id):
        variant = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found on {self.name}"]})
        return variant

    def price_for(self, variant_id=None):
        """Current selling price of the product, or of one of its variants."""
        if variant_id:
            return self.find_variant(variant_id).price
        return self.price

    def available_stock(self, variant_id=None):
        if variant_id:
            return self.find_variant(variant_id).stock
        return self.stock

    def adjust_stock(self, quantity_change, variant_id=None):
        target = self.find_variant(variant_id) if variant_id else self
        previous = target.stock or 0
        new_stock = previous + quantity_change
        if new_stock < 0:
            raise ValidationError({"stock": [f"Stock cannot drop below zero (currently {previous})"]})

        target.stock = new_stock
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                variant_id=str(variant_id) if variant_id else None,
                previous_stock=previous,
                new_stock=new_stock,
            )
        )
