"""Catalogue administration: commands and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    description = Text()
    image_url = String(max_length=1000)


@storefront.command(part_of="Product")
class AddProductVariant:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    options = Text()  # JSON object
    sku = String(max_length=100)
    image_url = String(max_length=1000)


@storefront.command(part_of="Product")
class AdjustStock:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity_change = Integer(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            slug=command.slug,
            price=command.price,
            stock=command.stock,
            description=command.description,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(AddProductVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            price=command.price,
            stock=command.stock,
            options=json.loads(command.options) if command.options else None,
            sku=command.sku,
            image_url=command.image_url,
        )
        repo.add(product)
        return str(variant.id)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.quantity_change, variant_id=command.variant_id)
        repo.add(product)
