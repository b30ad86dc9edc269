"""Store engine — the catalog, the customer registry and the order ledger.

One engine is built per process (see ``storefront.app.Storefront``) and shared
by every session. A single re-entrant lock guards all engine state, including
product stock and price changes made through the engine, so catalog updates,
registrations and checkouts are linearisable with respect to each other.

Disk writes and event delivery happen after the lock is released: a slow
history file never blocks catalog browsing, and listeners may call back into
the engine.

Checkout protocol:
    1. reject a missing or empty cart (no side effects)
    2. reject a cart holding more of any product than is in stock
    3. optionally take the quantities out of stock (``reserve_stock``)
    4. allocate the next order id
    5. snapshot the lines and price them through the discount strategy
    6. append the ``NEW`` order to the ledger and clear the cart
    7. append the order to the history file; a failed write is logged and the
       order stays in the ledger
"""

import threading

import structlog

from storefront.catalogue.catalog import Catalog
from storefront.discount.strategy import NoDiscount
from storefront.errors import HistoryStoreError
from storefront.events import (
    CustomerRegistered,
    EventChannel,
    HistoryRestored,
    OrderPlaced,
    OrderStatusChanged,
    PriceChanged,
    ProductAdded,
    ProductRemoved,
    StockChanged,
)
from storefront.order.order import UNKNOWN_CUSTOMER, Order

logger = structlog.get_logger(__name__)


class StoreEngine:
    def __init__(self, history_store=None, discount=None, channel=None):
        self._lock = threading.RLock()
        self._catalog = Catalog()
        self._customers = []
        self._orders = []
        self._next_order_id = 0
        self._history = history_store
        self._discount = discount or NoDiscount()
        self._channel = channel or EventChannel()

    @property
    def lock(self):
        """The engine lock, for callers that must group several engine calls atomically."""
        return self._lock

    @property
    def channel(self):
        return self._channel

    def subscribe(self, listener):
        return self._channel.subscribe(listener)

    def unsubscribe(self, listener) -> bool:
        return self._channel.unsubscribe(listener)

    # -------------------------------------------------------------------
    # Discount
    # -------------------------------------------------------------------
    @property
    def discount(self):
        with self._lock:
            return self._discount

    def set_discount(self, strategy):
        with self._lock:
            self._discount = strategy or NoDiscount()
        logger.info("Discount changed", discount=self._discount.display_name())

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def add_product(self, product):
        """Add a product, merging stock into an existing product with the same name."""
        if product is None:
            return None

        with self._lock:
            existed = self._catalog.find_by_name(product.name) is not None
            stored = self._catalog.add_product(product)
            stock = stored.stock

        self._channel.publish(ProductAdded(product_name=stored.name, stock=stock, merged=existed))
        return stored

    def find_product(self, name):
        with self._lock:
            return self._catalog.find_by_name(name)

    def available_products(self):
        with self._lock:
            return self._catalog.list_available()

    def all_products(self):
        with self._lock:
            return self._catalog.list_all()

    def remove_product(self, product) -> bool:
        with self._lock:
            removed = self._catalog.remove_product(product)

        if removed:
            logger.info("Product removed", product=product.name)
            self._channel.publish(ProductRemoved(product_name=product.name))
        return removed

    def increase_stock(self, product, amount) -> bool:
        if product is None:
            return False
        with self._lock:
            previous = product.stock
            changed = product.increase_stock(amount)
            current = product.stock

        if changed:
            self._channel.publish(StockChanged(product_name=product.name, previous_stock=previous, new_stock=current))
        return changed

    def decrease_stock(self, product, amount) -> bool:
        if product is None:
            return False
        with self._lock:
            previous = product.stock
            changed = product.decrease_stock(amount)
            current = product.stock

        if changed:
            self._channel.publish(StockChanged(product_name=product.name, previous_stock=previous, new_stock=current))
        return changed

    def update_price(self, product, price) -> bool:
        if product is None:
            return False
        with self._lock:
            previous = product.price
            changed = product.update_price(price)
            current = product.price

        if changed:
            self._channel.publish(PriceChanged(product_name=product.name, previous_price=previous, new_price=current))
        return changed

    # -------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------
    def register_customer(self, customer) -> bool:
        """Register ``customer`` unless the exact username is already taken."""
        if customer is None:
            return False

        with self._lock:
            if any(existing.username == customer.username for existing in self._customers):
                logger.info("Username already registered", username=customer.username)
                return False
            self._customers.append(customer)

        self._channel.publish(CustomerRegistered(username=customer.username))
        return True

    def find_customer(self, username):
        with self._lock:
            return next((c for c in self._customers if c.username == username), None)

    def customers(self):
        with self._lock:
            return list(self._customers)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def checkout(self, cart, customer_username=UNKNOWN_CUSTOMER, *, reserve_stock=False):
        """Turn ``cart`` into a ``NEW`` order. Returns ``None`` when the cart cannot be ordered."""
        stock_changes = []

        with self._lock:
            if cart is None or cart.is_empty():
                logger.info("Checkout rejected: empty cart", customer=customer_username)
                return None

            lines = cart.items()
            short = [item.product.name for item in lines if item.quantity > item.product.stock]
            if short:
                logger.info("Checkout rejected: insufficient stock", customer=customer_username, products=short)
                return None

            if reserve_stock:
                for item in lines:
                    previous = item.product.stock
                    item.product.decrease_stock(item.quantity)
                    stock_changes.append(
                        StockChanged(
                            product_name=item.product.name,
                            previous_stock=previous,
                            new_stock=item.product.stock,
                        )
                    )

            self._next_order_id += 1
            order = Order.from_cart_items(
                order_id=self._next_order_id,
                customer_username=customer_username,
                cart_items=lines,
                total_amount=self._discount.apply(cart.calculate_total()),
            )
            self._orders.append(order)
            cart.clear()

        logger.info(
            "Order placed",
            order_id=order.order_id,
            customer=order.customer_username,
            total=round(order.total_amount, 2),
        )

        self._persist(order)

        for event in stock_changes:
            self._channel.publish(event)
        self._channel.publish(
            OrderPlaced(
                order_id=order.order_id,
                customer_username=order.customer_username,
                total_amount=order.total_amount,
                item_count=order.item_count(),
            )
        )
        return order

    def _persist(self, order):
        if self._history is None:
            return
        try:
            self._history.append(order)
        except HistoryStoreError:
            logger.exception("Order kept in memory but not written to history", order_id=order.order_id)

    def all_orders(self):
        with self._lock:
            return list(self._orders)

    def orders_for(self, username):
        with self._lock:
            return [order for order in self._orders if order.customer_username == username]

    def find_order(self, order_id):
        with self._lock:
            return next((order for order in self._orders if order.order_id == order_id), None)

    def restore_history(self) -> int:
        """Load the history file into the ledger. Returns how many orders were added.

        Orders already in the ledger are not added twice, and the id counter moves
        past the highest restored id so new orders never reuse one.
        """
        if self._history is None:
            return 0

        with self._lock:
            products = {product.name.lower(): product for product in self._catalog.list_all()}
        loaded = self._history.load_all(lambda name: products.get(name.strip().lower()))

        with self._lock:
            known = {order.order_id for order in self._orders}
            restored = 0
            for order in loaded:
                if order.order_id in known:
                    continue
                known.add(order.order_id)
                self._orders.append(order)
                restored += 1
                self._next_order_id = max(self._next_order_id, order.order_id)

        logger.info("Order history restored", restored=restored, next_order_id=self._next_order_id + 1)
        self._channel.publish(HistoryRestored(restored=restored))
        return restored

    # -------------------------------------------------------------------
    # Order status
    # -------------------------------------------------------------------
    def pay_order(self, order) -> bool:
        return self._transition(order, Order.pay)

    def ship_order(self, order) -> bool:
        return self._transition(order, Order.ship)

    def deliver_order(self, order) -> bool:
        return self._transition(order, Order.deliver)

    def _transition(self, order, action) -> bool:
        if order is None:
            return False
        with self._lock:
            moved = action(order)
            status = order.status

        if moved:
            self._channel.publish(OrderStatusChanged(order_id=order.order_id, status=status.value))
        return moved
