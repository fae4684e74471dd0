"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was added to the catalog."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    category = String()
    sizes = Text(required=True)  # JSON: [{"size": "M", "stock": 3}, ...]
    best_seller = Boolean(default=False)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductEdited:
    """An operator replaced a product's details and size table."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    sizes = Text(required=True)  # JSON: [{"size": "M", "stock": 3}, ...]
    edited_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Units of one size were taken out of stock.

    ``requested`` can exceed ``previous_stock - new_stock`` when the decrement
    was floored at zero.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    requested = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    decremented_at = DateTime(required=True)
