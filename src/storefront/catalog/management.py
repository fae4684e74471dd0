"""Catalog management commands and their handler.

Operator-facing add, edit and removal of products. Edits and removals of a
product must run while its row lock is held (see ``storefront.stock.locks``)
so they serialize with checkouts touching the same product.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True)
    images: Text(required=True)  # JSON: list of image URLs
    category: String(required=True, max_length=100)
    sub_category: String(required=True, max_length=100)
    sizes: Text(required=True)  # JSON: list of {size, stock}
    best_seller: Boolean(default=False)


@storefront.command(part_of="Product")
class EditProduct:
    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True)
    images: Text(required=True)  # JSON: list of image URLs
    category: String(required=True, max_length=100)
    sub_category: String(required=True, max_length=100)
    sizes: Text(required=True)  # JSON: list of {size, stock}
    best_seller: Boolean(default=False)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id: Identifier(required=True)


def _load(repo, product_id):
    try:
        return repo.get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product", str(product_id)) from None


def _decode(value):
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Product)
class ManageCatalogHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            images=_decode(command.images),
            category=command.category,
            sub_category=command.sub_category,
            sizes=_decode(command.sizes),
            best_seller=command.best_seller or False,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), name=product.name)
        return str(product.id)

    @handle(EditProduct)
    def edit_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _load(repo, command.product_id)
        product.edit(
            name=command.name,
            description=command.description,
            price=command.price,
            images=_decode(command.images),
            category=command.category,
            sub_category=command.sub_category,
            sizes=_decode(command.sizes),
            best_seller=command.best_seller or False,
        )
        repo.add(product)
        logger.info("product_edited", product_id=str(product.id))

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _load(repo, command.product_id)
        repo._dao.delete(product)
        logger.info("product_removed", product_id=str(command.product_id))
