"""Catalog operations used by the API.

Edits and removals are processed while the product's row lock is held, so an
operator changing a size table can never interleave with a checkout or a
ledger decrement of the same product.
"""

import json

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.catalog.management import AddProduct, EditProduct, RemoveProduct
from storefront.catalog.product import Product
from storefront.errors import NotFound, TransactionConflict
from storefront.stock.locks import row_locks


def _product_command(command_cls, images, sizes, **fields):
    return command_cls(images=json.dumps(list(images or [])), sizes=json.dumps(list(sizes or [])), **fields)


def add_product(name, description, price, images, category, sub_category, sizes, best_seller=False) -> str:
    command = _product_command(
        AddProduct,
        images,
        sizes,
        name=name,
        description=description,
        price=price,
        category=category,
        sub_category=sub_category,
        best_seller=best_seller,
    )
    return current_domain.process(command, asynchronous=False)


def edit_product(product_id, name, description, price, images, category, sub_category, sizes, best_seller=False):
    command = _product_command(
        EditProduct,
        images,
        sizes,
        product_id=str(product_id),
        name=name,
        description=description,
        price=price,
        category=category,
        sub_category=sub_category,
        best_seller=best_seller,
    )
    with row_locks.hold([product_id]):
        try:
            current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            raise TransactionConflict("The product changed while it was being edited, please reload") from exc


def remove_product(product_id):
    with row_locks.hold([product_id]):
        current_domain.process(RemoveProduct(product_id=str(product_id)), asynchronous=False)


def get_product(product_id) -> Product:
    product = current_domain.repository_for(Product).find(product_id)
    if product is None:
        raise NotFound("Product", str(product_id))
    return product


def list_products() -> list[Product]:
    return current_domain.repository_for(Product).list_all()
