"""Order placement: the checkout transaction.

``OrderPlacer.place_order`` validates the request, takes the row locks of
every product in the cart (sorted, so overlapping checkouts cannot deadlock)
and processes ``PlaceOrder``. The handler runs in one unit of work:

    1. load fresh products (never a client's cached copy)
    2. check every line: product exists, size listed, stock >= quantity
    3. snapshot items into a new Order ("Order Placed", unpaid)
    4. decrement each line through the Stock Ledger
    5. clear the shopper's stored cart
    6. commit

Every check that can fail runs before anything is written, and the locks are
held until the unit of work has committed. Any failure leaves no order, no
stock change and the cart as it was.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront import settings
from storefront.cart.cart import ShoppingCart
from storefront.cart.reconciler import CartLine
from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound, StockDecrementFailed, TransactionConflict
from storefront.order.order import DeliveryAddress, Order, PaymentMethod
from storefront.stock.ledger import stock_ledger
from storefront.stock.locks import RowLocks, row_locks

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, size, quantity}
    address = Text(required=True)  # JSON: DeliveryAddress fields
    payment_method = String(max_length=10, default=PaymentMethod.COD.value)


def _item_snapshot(product, line):
    return {
        "product_id": str(product.id),
        "name": product.name,
        "price": product.price,
        "size": line.size,
        "quantity": line.quantity,
        "image": product.primary_image,
    }


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = [CartLine.from_dict(item) for item in json.loads(command.items)]
        address = DeliveryAddress(**json.loads(command.address))

        product_repo = current_domain.repository_for(Product)
        products = {pid: product_repo.find(pid) for pid in sorted({line.product_id for line in lines})}

        # Validate everything before touching anything
        for line in lines:
            product = products[line.product_id]
            if product is None:
                raise NotFound("Product", line.product_id)

            available = product.stock_for(line.size)
            if available is None or available < line.quantity:
                raise InsufficientStock(
                    product_id=line.product_id,
                    size=line.size,
                    requested=line.quantity,
                    available=available or 0,
                    name=product.name,
                )

        order = Order.place(
            user_id=command.user_id,
            items_data=[_item_snapshot(products[line.product_id], line) for line in lines],
            address=address,
            delivery_fee=settings.delivery_fee(),
            payment_method=command.payment_method or PaymentMethod.COD.value,
        )

        for line in lines:
            result = stock_ledger.apply(products[line.product_id], line.product_id, line.size, line.quantity)
            if not result.applied:
                raise StockDecrementFailed(line.product_id, line.size, result.outcome.value)

        current_domain.repository_for(Order).add(order)
        for product in products.values():
            product_repo.add(product)

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_user(command.user_id)
        if cart is not None and cart.items:
            cart.clear()
            cart_repo.add(cart)

        return str(order.id)


class OrderPlacer:
    """Places cash-on-delivery orders with all-or-nothing stock decrements."""

    def __init__(self, locks: RowLocks = row_locks):
        self._locks = locks

    @staticmethod
    def _prepare_lines(cart_lines) -> list[CartLine]:
        lines = [line if isinstance(line, CartLine) else CartLine.from_dict(line) for line in cart_lines or []]

        errors = []
        if any(line.quantity < 0 for line in lines):
            errors.append("Quantities cannot be negative")

        lines = [line for line in lines if line.quantity > 0]
        if not lines:
            errors.append("Your cart is empty")

        keys = [line.key for line in lines]
        if len(keys) != len(set(keys)):
            errors.append("Each product size can appear only once")

        if errors:
            raise ValidationError({"items": errors})
        return lines

    @staticmethod
    def _prepare_address(address) -> dict:
        if isinstance(address, DeliveryAddress):
            return address.to_dict()
        if not isinstance(address, dict):
            raise ValidationError({"address": ["Address is required"]})

        # Fails fast with field errors before any lock is taken
        return DeliveryAddress(**address).to_dict()

    def place_order(self, user_id, cart_lines, address, payment_method=PaymentMethod.COD.value) -> Order:
        if not user_id:
            raise ValidationError({"user_id": ["User is required"]})
        if payment_method not in [m.value for m in PaymentMethod]:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})

        lines = self._prepare_lines(cart_lines)
        address_data = self._prepare_address(address)

        command = PlaceOrder(
            user_id=str(user_id),
            items=json.dumps([{"product_id": line.product_id, "size": line.size, "quantity": line.quantity} for line in lines]),
            address=json.dumps(address_data),
            payment_method=payment_method,
        )

        with self._locks.hold(line.product_id for line in lines):
            try:
                order_id = current_domain.process(command, asynchronous=False)
            except ExpectedVersionError as exc:
                logger.warning("order_placement_conflict", user_id=str(user_id))
                raise TransactionConflict() from exc
            except (InsufficientStock, NotFound) as exc:
                logger.info("order_placement_rejected", user_id=str(user_id), reason=exc.reason)
                raise

        order = current_domain.repository_for(Order).get(order_id)
        logger.info("order_placed", order_id=order_id, user_id=str(user_id), amount=order.amount)
        return order


order_placer = OrderPlacer()
