"""Tests for Order construction, snapshots and the status state machine."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from storefront.cart.cart import Cart
from storefront.order.order import UNKNOWN_CUSTOMER, Order, OrderItem, OrderStatus


@pytest.fixture
def order():
    return Order(order_id=1, customer_username="dana", total_amount=10.0)


class TestOrderConstruction:
    def test_new_order_defaults(self, order):
        assert order.status is OrderStatus.NEW
        assert order.items == ()
        assert order.created_at.microsecond == 0

    def test_blank_customer_is_unknown(self):
        assert Order(order_id=2, customer_username=" ", total_amount=0).customer_username == UNKNOWN_CUSTOMER

    def test_created_at_is_truncated_to_seconds(self):
        order = Order(order_id=3, total_amount=1.0, created_at=datetime(2024, 5, 1, 10, 30, 15, 987654))
        assert order.created_at == datetime(2024, 5, 1, 10, 30, 15)

    def test_negative_total_is_rejected(self):
        with pytest.raises(ValidationError):
            Order(order_id=4, total_amount=-0.01)

    def test_everything_but_status_is_frozen(self, order):
        with pytest.raises(ValidationError):
            order.total_amount = 99.0
        with pytest.raises(ValidationError):
            order.order_id = 7

    def test_equal_by_id(self, order):
        assert order == Order(order_id=1, customer_username="other", total_amount=55.0)
        assert order != Order(order_id=2, customer_username="dana", total_amount=10.0)


class TestOrderSnapshot:
    def test_items_snapshot_the_cart(self, laptop, novel):
        cart = Cart()
        cart.add_item(laptop, 2)
        cart.add_item(novel, 1)

        order = Order.from_cart_items(5, "dana", cart.items(), cart.calculate_total())
        laptop.update_price(1.0)

        assert order.items[0] == OrderItem(
            product_name="Laptop", category=laptop.category, unit_price=3500.0, quantity=2
        )
        assert order.item_count() == 3
        assert order.total_amount == pytest.approx(7045.5)

    def test_item_string(self):
        assert str(OrderItem(product_name="Dune", unit_price=1.0, quantity=2)) == "Dune x2"

    def test_order_string(self, order):
        text = str(order)
        assert "Order ID: 1" in text
        assert "Status: New" in text
        assert "Total Amount: 10.00" in text


class TestOrderStateMachine:
    def test_full_lifecycle(self, order):
        assert order.pay() is True
        assert order.ship() is True
        assert order.deliver() is True
        assert order.status is OrderStatus.DELIVERED

    def test_ship_requires_paid(self, order):
        assert order.ship() is False
        assert order.status is OrderStatus.NEW

    def test_deliver_requires_shipped(self, order):
        assert order.deliver() is False
        order.pay()
        assert order.deliver() is False
        assert order.status is OrderStatus.PAID

    def test_ship_twice_is_refused(self, order):
        order.pay()
        order.ship()
        assert order.ship() is False
        assert order.status is OrderStatus.SHIPPED

    def test_pay_is_idempotent(self, order):
        order.pay()
        assert order.pay() is True
        assert order.status is OrderStatus.PAID

    @pytest.mark.parametrize("steps", [("ship",), ("ship", "deliver")])
    def test_pay_forces_paid_from_later_states(self, order, steps):
        order.pay()
        for step in steps:
            getattr(order, step)()

        assert order.pay() is True
        assert order.status is OrderStatus.PAID
