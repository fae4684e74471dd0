"""BDD tests for cash-on-delivery order placement and the order lifecycle."""

from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.reconciler import CartLine
from storefront.catalog import operations as catalog
from storefront.errors import StorefrontError
from storefront.order.order import Order
from storefront.order.placement import order_placer
from storefront.order.status import RecordPayment, SetOrderStatus

from tests.storefront.factories import address_payload, product_payload

scenarios("features/order_placement.feature")

SHOPPER = "shopper-1"


def _place(product_id, quantity, size):
    return order_placer.place_order(SHOPPER, [CartLine(product_id, size, quantity)], address_payload())


def _reload(order):
    return current_domain.repository_for(Order).get(order.id)


# ---------------------------------------------------------------------------
# Given / When steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the shopper ordered {quantity:d} of size "{size}"'), target_fixture="order")
def shopper_ordered(product_id, quantity, size):
    return _place(product_id, quantity, size)


@when(parsers.cfparse('the shopper orders {quantity:d} of size "{size}"'), target_fixture="outcome")
def shopper_orders(product_id, quantity, size):
    try:
        return _place(product_id, quantity, size)
    except StorefrontError as exc:
        return exc


@when(parsers.cfparse('the operator sets the order status to "{status}"'))
def operator_sets_status(order, status):
    current_domain.process(SetOrderStatus(order_id=str(order.id), status=status), asynchronous=False)


@when("the operator records the payment")
def operator_records_payment(order):
    current_domain.process(RecordPayment(order_id=str(order.id)), asynchronous=False)


@when(parsers.cfparse('the operator renames the product to "{name}" priced {price:f}'))
def operator_renames_product(product_id, name, price):
    catalog.edit_product(product_id, **product_payload(name=name, price=price))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("an order is placed with amount {amount:f}"), target_fixture="order")
def order_placed_with_amount(outcome, amount):
    assert isinstance(outcome, Order)
    assert outcome.amount == amount
    return outcome


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert _reload(order).status == status


@then("the order is unpaid")
def order_unpaid(order):
    assert _reload(order).payment is False


@then("the order is paid")
def order_paid(order):
    assert _reload(order).payment is True


@then(parsers.cfparse('the order is rejected with "{reason}"'))
def order_rejected(outcome, reason):
    assert isinstance(outcome, StorefrontError)
    assert outcome.reason == reason


@then("the shopper has no orders")
def shopper_has_no_orders():
    assert current_domain.repository_for(Order).for_user(SHOPPER) == []


@then(parsers.cfparse('the ordered item is still named "{name}" at {price:f}'))
def ordered_item_unchanged(order, name, price):
    item = _reload(order).items[0]
    assert item.name == name
    assert item.price == price
