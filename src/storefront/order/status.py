"""Operator commands for order status and cash-on-delivery payment.

Neither command touches stock.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@storefront.command(part_of="Order")
class RecordPayment:
    """Record that cash was collected for a cash-on-delivery order."""

    order_id = Identifier(required=True)


def _load(repo, order_id):
    try:
        return repo.get(order_id)
    except ObjectNotFoundError:
        raise NotFound("Order", str(order_id)) from None


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(SetOrderStatus)
    def set_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = _load(repo, command.order_id)
        previous = order.status
        order.set_status(command.status)
        repo.add(order)
        logger.info("order_status_set", order_id=str(order.id), previous_status=previous, status=order.status)

    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = _load(repo, command.order_id)
        order.record_payment()
        repo.add(order)
        logger.info("order_payment_recorded", order_id=str(order.id), amount=order.amount)
