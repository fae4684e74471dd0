"""Shopping Cart aggregate, one explicit cart per shopper.

The cart only records what the shopper asked for. Whether a line can still be
bought is never stored here; it is recomputed by ``storefront.cart.reconciler``
against a fresh catalog snapshot whenever the cart is shown.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.cart.reconciler import CartLine
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=3)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product_size(self):
        keys = [(str(i.product_id), i.size) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A product size can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def _find(self, product_id, size):
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and i.size == size),
            None,
        )

    def add_item(self, product_id, size, quantity):
        """Add units of a product size (or increase the existing line)."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        now = datetime.now(UTC)
        existing = self._find(product_id, size)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, size=size, quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                size=size,
                quantity=quantity,
            )
        )

    def set_quantity(self, product_id, size, quantity):
        """Set a line's quantity; zero removes the line."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self._find(product_id, size)
        if item is None:
            if quantity == 0:
                return
            self.add_item(product_id, size, quantity)
            return

        now = datetime.now(UTC)
        if quantity == 0:
            self.remove_items(item)
            self.updated_at = now
            self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id), size=size))
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = now

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                size=size,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def clear(self):
        """Remove every line."""
        if not self.items:
            return

        for item in list(self.items):
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), cleared_at=now))

    def lines(self):
        """The cart's contents as unreconciled ``CartLine`` values, in insertion order."""
        return [CartLine(product_id=str(i.product_id), size=i.size, quantity=i.quantity) for i in self.items]
