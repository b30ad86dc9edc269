"""Store sessions, one per customer or manager window.

Each session owns a ``WorkerLane``: a single background thread that runs the
session's blocking work (checkout with its history write, catalog file
import/export) so the caller's thread never waits on disk. Results come back
through ``dispatch``, which a UI replaces with its own "run on the UI thread"
hook; by default callbacks run directly on the lane.

Cart and catalog reads go through the engine lock, so a session always sees
a consistent snapshot even while other sessions are checking out.
"""

import functools
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from storefront.events import OrderStatusChanged
from storefront.utils.logging import add_context

logger = structlog.get_logger(__name__)


def _call_now(callback):
    callback()


class WorkerLane:
    """A single-threaded executor for one session."""

    def __init__(self, name: str, dispatch=None):
        self.name = name
        self._dispatch = dispatch or _call_now
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=name,
            initializer=functools.partial(add_context, session=name),
        )

    def run_async(self, task, on_success=None, on_error=None) -> Future:
        """Run ``task`` on the lane.

        ``on_success(result)`` or ``on_error(exc)`` is delivered through the
        dispatch hook. The returned future also carries the result or exception.
        """

        def runner():
            try:
                result = task()
            except Exception as exc:
                logger.warning("Session task failed", lane=self.name, error=str(exc))
                if on_error is not None:
                    self._dispatch(functools.partial(on_error, exc))
                raise

            if on_success is not None:
                self._dispatch(functools.partial(on_success, result))
            return result

        return self._executor.submit(runner)

    def close(self, wait: bool = True):
        self._executor.shutdown(wait=wait)


class StoreSession:
    """Everything one open store window can do.

    A session with a ``manager`` may change the catalog; a session with a
    ``customer`` may shop. Both can be present.
    """

    def __init__(self, engine, customer=None, manager=None, *, shipping=None, reserve_stock=True, dispatch=None):
        self.engine = engine
        self.customer = customer
        self.manager = manager
        self.reserve_stock = reserve_stock
        self._shipping = shipping
        self._listeners = []

        owner = customer or manager
        self.lane = WorkerLane(f"session-{owner.username if owner else 'anonymous'}", dispatch)

    @property
    def can_manage(self) -> bool:
        return self.manager is not None

    def on_change(self, listener):
        """Subscribe ``listener`` to engine events for the lifetime of this session."""
        self.engine.subscribe(listener)
        self._listeners.append(listener)
        return listener

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def available_products(self):
        return self.engine.available_products()

    def all_products(self):
        return self.engine.all_products()

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, product, quantity) -> bool:
        if self.customer is None:
            return False
        with self.engine.lock:
            return self.customer.add_to_cart(product, quantity)

    def remove_from_cart(self, product) -> bool:
        if self.customer is None:
            return False
        with self.engine.lock:
            return self.customer.remove_from_cart(product)

    def cart_items(self):
        if self.customer is None:
            return []
        with self.engine.lock:
            return self.customer.cart_items()

    def cart_total(self) -> float:
        if self.customer is None:
            return 0.0
        with self.engine.lock:
            return self.engine.discount.apply(self.customer.cart.calculate_total())

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def checkout(self):
        """Place an order from the customer's cart. Returns the order or ``None``."""
        if self.customer is None:
            return None

        order = self.engine.checkout(
            self.customer.cart,
            self.customer.username,
            reserve_stock=self.reserve_stock,
        )
        if order is not None:
            self.customer.record_order(order)
        return order

    def checkout_async(self, on_success=None, on_error=None) -> Future:
        return self.lane.run_async(self.checkout, on_success, on_error)

    def customer_orders(self):
        if self.customer is None:
            return []
        return self.customer.order_history()

    def all_orders(self):
        return self.engine.all_orders()

    def ship_order(self, order):
        """Hand ``order`` to the shipping provider. Returns the tracking code.

        The provider runs without the engine lock; the order's own transition
        lock serialises its status changes.
        """
        if order is None or self._shipping is None:
            return None

        previous = order.status
        tracking = self._shipping.ship_order(order)
        status = order.status

        if status != previous:
            self.engine.channel.publish(OrderStatusChanged(order_id=order.order_id, status=status.value))
        return tracking

    # -------------------------------------------------------------------
    # Management
    # -------------------------------------------------------------------
    def add_product(self, product) -> bool:
        if not self.can_manage or product is None:
            return False
        self.engine.add_product(product)
        return True

    def remove_product(self, product) -> bool:
        if not self.can_manage:
            return False
        return self.engine.remove_product(product)

    def increase_stock(self, product, amount) -> bool:
        if not self.can_manage:
            return False
        return self.engine.increase_stock(product, amount)

    def decrease_stock(self, product, amount) -> bool:
        if not self.can_manage:
            return False
        return self.engine.decrease_stock(product, amount)

    def update_price(self, product, price) -> bool:
        if not self.can_manage:
            return False
        return self.engine.update_price(product, price)

    def load_catalog(self, catalog_file) -> int:
        """Import every product in ``catalog_file``. Returns how many rows were loaded."""
        if not self.can_manage:
            return 0
        products = catalog_file.load()
        for product in products:
            self.engine.add_product(product)
        return len(products)

    def save_catalog(self, catalog_file) -> bool:
        if not self.can_manage:
            return False
        catalog_file.save(self.engine.all_products())
        return True

    def submit(self, task, on_success=None, on_error=None) -> Future:
        """Run any blocking ``task`` on this session's lane."""
        return self.lane.run_async(task, on_success, on_error)

    def close(self):
        for listener in self._listeners:
            self.engine.unsubscribe(listener)
        self._listeners.clear()
        self.lane.close()
