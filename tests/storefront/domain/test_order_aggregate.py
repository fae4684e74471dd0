"""Tests for the Order aggregate, its status machine and payment flag."""

import pytest
from protean.exceptions import ValidationError
from storefront.order.events import OrderPaymentRecorded, OrderPlaced, OrderStatusChanged
from storefront.order.order import DeliveryAddress, Order, OrderStatus

from tests.storefront.factories import address_payload


def _items():
    return [
        {"product_id": "p1", "name": "Tee", "price": 25.0, "size": "M", "quantity": 2, "image": "tee.png"},
        {"product_id": "p2", "name": "Hoodie", "price": 40.0, "size": "L", "quantity": 1, "image": None},
    ]


def _order(**overrides):
    kwargs = {
        "user_id": "user-1",
        "items_data": _items(),
        "address": DeliveryAddress(**address_payload()),
        "delivery_fee": 10.0,
    }
    kwargs.update(overrides)
    order = Order.place(**kwargs)
    order._events.clear()
    return order


class TestPlaceOrder:
    def test_new_order_is_placed_and_unpaid(self):
        order = _order()
        assert order.status == OrderStatus.ORDER_PLACED.value
        assert order.payment is False
        assert order.payment_method == "COD"
        assert order.placed_at is not None

    def test_amount_is_items_plus_delivery_fee(self):
        order = _order()
        assert order.subtotal == 90.0
        assert order.amount == 100.0
        assert order.delivery_fee == 10.0

    def test_items_are_snapshots(self):
        order = _order()
        first = order.items[0]
        assert (first.name, first.price, first.size, first.quantity) == ("Tee", 25.0, "M", 2)

    def test_place_raises_order_placed(self):
        order = Order.place(
            user_id="user-1",
            items_data=_items(),
            address=DeliveryAddress(**address_payload()),
            delivery_fee=10.0,
        )
        assert isinstance(order._events[-1], OrderPlaced)

    def test_order_needs_items(self):
        with pytest.raises(ValidationError):
            _order(items_data=[])


class TestDeliveryAddress:
    def test_all_fields_are_required(self):
        payload = address_payload()
        del payload["phone"]
        with pytest.raises(ValidationError) as exc:
            DeliveryAddress(**payload)
        assert "phone" in exc.value.messages

    @pytest.mark.parametrize("email", ["no-at-sign", "two@@example.com", "sam@localhost", "sam @example.com"])
    def test_malformed_email_is_rejected(self, email):
        with pytest.raises(ValidationError) as exc:
            DeliveryAddress(**address_payload(email=email))
        assert "email" in exc.value.messages


class TestOrderStatus:
    def test_status_values(self):
        assert [s.value for s in OrderStatus] == [
            "Order Placed",
            "Packing",
            "Shipped",
            "Out for Delivery",
            "Delivered",
        ]

    def test_set_status(self):
        order = _order()
        order.set_status("Shipped")
        assert order.status == "Shipped"
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert (event.previous_status, event.new_status) == ("Order Placed", "Shipped")

    def test_any_status_may_follow_any_other(self):
        order = _order()
        order.set_status("Delivered")
        order.set_status("Packing")
        assert order.status == "Packing"

    def test_unknown_status_is_rejected(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.set_status("Lost")
        assert order.status == "Order Placed"

    def test_setting_the_same_status_is_a_no_op(self):
        order = _order()
        order.set_status("Order Placed")
        assert order._events == []


class TestRecordPayment:
    def test_record_payment(self):
        order = _order()
        order.record_payment()
        assert order.payment is True
        assert isinstance(order._events[-1], OrderPaymentRecorded)

    def test_payment_is_recorded_once(self):
        order = _order()
        order.record_payment()
        with pytest.raises(ValidationError):
            order.record_payment()

    def test_status_change_leaves_payment_alone(self):
        order = _order()
        order.set_status("Delivered")
        assert order.payment is False
