import pytest

from storefront.catalogue.factory import create_book, create_clothing, create_electronics
from storefront.config import Settings
from storefront.customers.customer import Customer, Manager
from storefront.engine import StoreEngine
from storefront.history.store import OrderHistoryStore


@pytest.fixture
def laptop():
    return create_electronics(
        name="Laptop",
        price=3500.0,
        stock=5,
        description="Light and fast",
        warranty_months=24,
        brand="Acme",
    )


@pytest.fixture
def novel():
    return create_book(name="Dune", price=45.5, stock=10, author="Frank Herbert", pages=412)


@pytest.fixture
def tshirt():
    return create_clothing(name="T-Shirt", price=19.99, stock=20, size="L")


@pytest.fixture
def customer():
    return Customer("dana", "dana@example.com")


@pytest.fixture
def manager():
    return Manager("root", "root@example.com")


@pytest.fixture
def history_store(tmp_path):
    return OrderHistoryStore(tmp_path / "orders_history.csv")


@pytest.fixture
def engine(history_store, laptop, novel, tshirt):
    engine = StoreEngine(history_store=history_store)
    for product in (laptop, novel, tshirt):
        engine.add_product(product)
    return engine


@pytest.fixture
def settings(tmp_path):
    return Settings(
        env="test",
        history_file=tmp_path / "orders_history.csv",
        catalog_file=tmp_path / "products_catalog.csv",
        log_dir=None,
    )
