"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.cart.reconciler import CartLine


def _cart():
    cart = ShoppingCart.create(user_id="user-1")
    cart._events.clear()
    return cart


class TestAddItem:
    def test_add_new_line(self):
        cart = _cart()
        cart.add_item("p1", "M", 2)
        assert cart.lines() == [CartLine("p1", "M", 2)]
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_add_same_line_merges_quantity(self):
        cart = _cart()
        cart.add_item("p1", "M", 2)
        cart.add_item("p1", "M", 1)
        assert cart.lines() == [CartLine("p1", "M", 3)]

    def test_sizes_are_separate_lines(self):
        cart = _cart()
        cart.add_item("p1", "M", 1)
        cart.add_item("p1", "L", 1)
        assert len(cart.items) == 2

    def test_quantity_must_be_positive(self):
        cart = _cart()
        with pytest.raises(ValidationError):
            cart.add_item("p1", "M", 0)


class TestSetQuantity:
    def test_set_quantity(self):
        cart = _cart()
        cart.add_item("p1", "M", 1)
        cart.set_quantity("p1", "M", 4)
        assert cart.lines()[0].quantity == 4
        event = cart._events[-1]
        assert isinstance(event, CartQuantityUpdated)
        assert event.previous_quantity == 1

    def test_zero_removes_the_line(self):
        cart = _cart()
        cart.add_item("p1", "M", 1)
        cart.set_quantity("p1", "M", 0)
        assert cart.lines() == []
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_setting_an_absent_line_adds_it(self):
        cart = _cart()
        cart.set_quantity("p1", "S", 2)
        assert cart.lines() == [CartLine("p1", "S", 2)]

    def test_negative_quantity_is_rejected(self):
        cart = _cart()
        with pytest.raises(ValidationError):
            cart.set_quantity("p1", "M", -1)


class TestClear:
    def test_clear_removes_every_line(self):
        cart = _cart()
        cart.add_item("p1", "M", 1)
        cart.add_item("p2", "L", 2)
        cart.clear()
        assert cart.lines() == []
        assert isinstance(cart._events[-1], CartCleared)

    def test_clearing_an_empty_cart_raises_nothing(self):
        cart = _cart()
        cart.clear()
        assert cart._events == []
