"""Concurrent sessions against one engine."""

import threading
from concurrent.futures import ThreadPoolExecutor

from storefront.cart.cart import Cart
from storefront.catalogue.factory import create_electronics
from storefront.history.store import OrderHistoryStore

WORKERS = 8
ORDERS_PER_WORKER = 25


def test_concurrent_checkouts_get_unique_increasing_ids(engine, laptop, history_store):
    laptop.increase_stock(WORKERS * ORDERS_PER_WORKER)
    start = threading.Barrier(WORKERS)

    def shop(worker):
        start.wait()
        placed = []
        for _ in range(ORDERS_PER_WORKER):
            cart = Cart()
            cart.add_item(laptop, 1)
            placed.append(engine.checkout(cart, f"worker-{worker}").order_id)
        return placed

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(shop, range(WORKERS)))

    ids = [order_id for placed in results for order_id in placed]
    assert sorted(ids) == list(range(1, WORKERS * ORDERS_PER_WORKER + 1))
    for placed in results:
        assert placed == sorted(placed)

    ledger = [order.order_id for order in engine.all_orders()]
    assert ledger == sorted(ledger)

    restored = OrderHistoryStore(history_store.path).load_all(engine.find_product)
    assert sorted(order.order_id for order in restored) == sorted(ids)


def test_reserved_stock_is_never_oversold(engine, laptop):
    start = threading.Barrier(WORKERS)

    def shop(worker):
        start.wait()
        cart = Cart()
        cart.add_item(laptop, 1)
        return engine.checkout(cart, f"worker-{worker}", reserve_stock=True)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        orders = list(pool.map(shop, range(WORKERS)))

    placed = [order for order in orders if order is not None]
    assert len(placed) == 5
    assert laptop.stock == 0


def test_concurrent_merges_keep_every_unit(engine, laptop):
    start = threading.Barrier(WORKERS)

    def restock(_):
        start.wait()
        for _ in range(10):
            engine.add_product(create_electronics(name="Laptop", price=3500.0, stock=1))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(restock, range(WORKERS)))

    assert laptop.stock == 5 + WORKERS * 10
    assert len(engine.all_products()) == 3


def test_restore_and_grouped_checkouts_do_not_deadlock(engine, laptop, history_store):
    history_store.path.write_text(
        "".join(f"{order_id},3500.00,2024-03-09T14:05:30,Laptop x1;\n" for order_id in range(1, 5001)),
        encoding="utf-8",
    )

    def restore():
        engine.restore_history()

    def buy():
        for _ in range(50):
            cart = Cart()
            cart.add_item(laptop, 1)
            with engine.lock:
                engine.checkout(cart, "dana")

    restorer = threading.Thread(target=restore, daemon=True)
    buyer = threading.Thread(target=buy, daemon=True)
    restorer.start()
    buyer.start()
    restorer.join(timeout=30)
    buyer.join(timeout=30)

    assert not restorer.is_alive()
    assert not buyer.is_alive()
    assert len({order.order_id for order in engine.all_orders()}) == len(engine.all_orders())
