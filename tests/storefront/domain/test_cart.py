"""Tests for Cart and CartItem."""

import pytest

from storefront.cart.cart import Cart, CartItem
from storefront.catalogue.factory import create_electronics


@pytest.fixture
def cart():
    return Cart()


class TestCartItem:
    def test_non_positive_quantity_becomes_one(self, laptop):
        assert CartItem(laptop, 0).quantity == 1

    def test_set_quantity(self, laptop):
        item = CartItem(laptop, 2)
        assert item.set_quantity(4) is True
        assert item.set_quantity(0) is False
        assert item.quantity == 4

    def test_line_total_uses_current_price(self, laptop):
        item = CartItem(laptop, 2)
        laptop.update_price(100.0)
        assert item.line_total() == 200.0

    def test_equal_when_products_equal(self, laptop):
        twin = create_electronics(name="Laptop", price=1.0, brand="Acme")
        assert CartItem(laptop, 1) == CartItem(twin, 3)
        assert CartItem(laptop, 1) != CartItem(create_electronics(name="Laptop", price=1.0, brand="Other"), 1)


class TestCart:
    def test_new_cart_is_empty(self, cart):
        assert cart.is_empty()
        assert len(cart) == 0
        assert cart.calculate_total() == 0.0

    def test_add_merges_quantities(self, cart, laptop):
        assert cart.add_item(laptop, 1)
        assert cart.add_item(laptop, 2)
        assert len(cart) == 1
        assert cart.quantity_of(laptop) == 3

    @pytest.mark.parametrize("quantity", [0, -1, 2.5, None])
    def test_invalid_quantity_is_refused(self, cart, laptop, quantity):
        assert cart.add_item(laptop, quantity) is False
        assert cart.is_empty()

    def test_none_product_is_refused(self, cart):
        assert cart.add_item(None, 1) is False

    def test_lines_keep_insertion_order(self, cart, laptop, novel, tshirt):
        cart.add_item(novel, 1)
        cart.add_item(laptop, 1)
        cart.add_item(tshirt, 1)
        assert [item.product.name for item in cart.items()] == ["Dune", "Laptop", "T-Shirt"]

    def test_remove_drops_the_whole_line(self, cart, laptop, novel):
        cart.add_item(laptop, 3)
        cart.add_item(novel, 1)
        assert cart.remove_item(laptop) is True
        assert cart.quantity_of(laptop) == 0
        assert len(cart) == 1

    def test_remove_missing_product(self, cart, laptop):
        assert cart.remove_item(laptop) is False
        assert cart.remove_item(None) is False

    def test_total(self, cart, laptop, novel):
        cart.add_item(laptop, 2)
        cart.add_item(novel, 2)
        assert cart.calculate_total() == pytest.approx(7091.0)

    def test_items_is_a_copy(self, cart, laptop):
        cart.add_item(laptop, 1)
        cart.items().clear()
        assert len(cart) == 1

    def test_clear(self, cart, laptop):
        cart.add_item(laptop, 1)
        cart.clear()
        assert cart.is_empty()
