"""Tests for catalog management through the store engine."""

import pytest

from storefront.catalogue.factory import create_book, create_electronics
from storefront.engine import StoreEngine
from storefront.events import PriceChanged, ProductAdded, ProductRemoved, StockChanged


@pytest.fixture
def events(engine):
    received = []
    engine.subscribe(received.append)
    return received


class TestAddProduct:
    def test_products_are_listed_in_insertion_order(self, engine):
        assert [p.name for p in engine.all_products()] == ["Laptop", "Dune", "T-Shirt"]

    def test_same_name_merges_stock(self, engine, laptop, events):
        stored = engine.add_product(create_electronics(name="laptop", price=1.0, stock=4))

        assert stored is laptop
        assert laptop.stock == 9
        assert laptop.price == 3500.0
        assert len(engine.all_products()) == 3
        assert events == [ProductAdded(product_name="Laptop", stock=9, merged=True, occurred_at=events[0].occurred_at)]

    def test_new_product_is_appended(self, engine, events):
        atlas = create_book(name="Atlas", price=20.0, stock=1)
        assert engine.add_product(atlas) is atlas
        assert engine.all_products()[-1] is atlas
        assert events[0].merged is False

    def test_none_is_ignored(self, engine, events):
        assert engine.add_product(None) is None
        assert len(engine.all_products()) == 3
        assert events == []


class TestLookups:
    def test_find_product_ignores_case(self, engine, novel):
        assert engine.find_product("dune") is novel
        assert engine.find_product("Unknown") is None
        assert engine.find_product(None) is None

    def test_available_products_skip_empty_stock(self, engine, laptop):
        laptop.decrease_stock(5)
        assert laptop not in engine.available_products()
        assert laptop in engine.all_products()

    def test_listings_are_copies(self, engine):
        engine.all_products().clear()
        engine.available_products().clear()
        assert len(engine.all_products()) == 3


class TestRemoveProduct:
    def test_remove(self, engine, novel, events):
        assert engine.remove_product(novel) is True
        assert engine.find_product("Dune") is None
        assert isinstance(events[0], ProductRemoved)

    def test_remove_unknown(self, engine, events):
        assert engine.remove_product(create_book(name="Atlas", price=1.0)) is False
        assert engine.remove_product(None) is False
        assert events == []


class TestStockAndPrice:
    def test_increase_stock_publishes_change(self, engine, laptop, events):
        assert engine.increase_stock(laptop, 2) is True
        assert events[0].previous_stock == 5
        assert events[0].new_stock == 7
        assert isinstance(events[0], StockChanged)

    def test_decrease_stock_beyond_available(self, engine, laptop, events):
        assert engine.decrease_stock(laptop, 6) is False
        assert laptop.stock == 5
        assert events == []

    def test_update_price(self, engine, novel, events):
        assert engine.update_price(novel, 50) is True
        assert novel.price == 50.0
        assert events == [
            PriceChanged(product_name="Dune", previous_price=45.5, new_price=50.0, occurred_at=events[0].occurred_at)
        ]

    def test_update_price_rejects_invalid(self, engine, novel, events):
        assert engine.update_price(novel, -1) is False
        assert engine.update_price(None, 10) is False
        assert novel.price == 45.5
        assert events == []


class TestCustomers:
    def test_register_customer(self, engine, customer):
        assert engine.register_customer(customer) is True
        assert engine.find_customer("dana") is customer

    def test_duplicate_username_is_refused(self, engine, customer):
        engine.register_customer(customer)
        assert engine.register_customer(type(customer)("dana", "other@example.com")) is False
        assert len(engine.customers()) == 1

    def test_usernames_are_case_sensitive(self, engine, customer):
        engine.register_customer(customer)
        assert engine.register_customer(type(customer)("Dana")) is True

    def test_none_is_refused(self):
        assert StoreEngine().register_customer(None) is False
