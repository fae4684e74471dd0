"""Order aggregate — an immutable record of what was bought, and at what price.

Items are snapshots copied from the catalog when the order is placed; they are
never re-read from products, so editing or deleting a product cannot change a
historical order. After creation only ``status`` and ``payment`` change.

Statuses:
    Order Placed, Packing, Shipped, Out for Delivery, Delivered

Operators may set any status from any other; no progression is enforced.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderPaymentRecorded, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    ORDER_PLACED = "Order Placed"
    PACKING = "Packing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"


class PaymentMethod(Enum):
    COD = "COD"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class DeliveryAddress:
    """Where and to whom the order ships, captured at checkout.

    Once recorded on an Order the address never changes.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)

    @invariant.post
    def email_must_be_well_formed(self):
        email = self.email or ""
        local_part, _, domain_part = email.partition("@")
        if (
            email.count("@") != 1
            or " " in email
            or not local_part
            or "." not in domain_part
            or domain_part.startswith(".")
            or domain_part.endswith(".")
        ):
            raise ValidationError({"email": ["Invalid email address"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """Snapshot of one purchased product size."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    size = String(required=True, max_length=3)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=500)

    @property
    def line_total(self):
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    address = ValueObject(DeliveryAddress, required=True)
    amount = Float(required=True, min_value=0.0)
    delivery_fee = Float(default=0.0)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment = Boolean(default=False)
    status = String(choices=OrderStatus, default=OrderStatus.ORDER_PLACED.value)
    placed_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order needs at least one item"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, items_data, address, delivery_fee, payment_method=PaymentMethod.COD.value):
        """Create an order from item snapshots.

        Args:
            user_id: The shopper placing the order.
            items_data: List of dicts with product_id, name, price, size,
                        quantity and image, copied from the catalog.
            address: A ``DeliveryAddress``.
            delivery_fee: Flat fee added to the items total.
            payment_method: Only cash on delivery is supported.
        """
        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(item["product_id"]),
                name=item["name"],
                price=item["price"],
                size=item["size"],
                quantity=item["quantity"],
                image=item.get("image"),
            )
            for item in items_data
        ]
        amount = sum(item.line_total for item in items) + delivery_fee

        order = cls(
            user_id=user_id,
            items=items,
            address=address,
            amount=amount,
            delivery_fee=delivery_fee,
            payment_method=payment_method,
            payment=False,
            status=OrderStatus.ORDER_PLACED.value,
            placed_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps([{**item, "product_id": str(item["product_id"])} for item in items_data]),
                amount=amount,
                delivery_fee=delivery_fee,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    @property
    def subtotal(self):
        return sum(item.line_total for item in self.items)

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def set_status(self, new_status):
        """Move the order to ``new_status``; any status may follow any other."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        previous = self.status
        if previous == target.value:
            return

        self.status = target.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self):
        """Mark a cash-on-delivery order as paid."""
        if self.payment:
            raise ValidationError({"payment": ["Payment has already been recorded for this order"]})

        self.payment = True
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(OrderPaymentRecorded(order_id=str(self.id), amount=self.amount, recorded_at=now))
