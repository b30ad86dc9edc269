"""Customers with carts and order history, and managers.

Being a manager is a capability flag for the session, not a security
boundary. Users are equal when their usernames are equal.
"""

import structlog

from storefront.cart.cart import Cart

logger = structlog.get_logger(__name__)

UNKNOWN_USERNAME = "Unknown user"
UNKNOWN_EMAIL = "unknown@example.com"


def _filled(value, fallback):
    return value if value is not None and value.strip() else fallback


class User:
    def __init__(self, username=None, email=None):
        self.username = _filled(username, UNKNOWN_USERNAME)
        self.email = _filled(email, UNKNOWN_EMAIL)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, User):
            return NotImplemented
        return self.username == other.username

    def __hash__(self):
        return hash(self.username)

    def __repr__(self):
        return f"{type(self).__name__}(username={self.username!r})"


class Customer(User):
    """A shopper with exactly one cart and a personal order history."""

    def __init__(self, username=None, email=None):
        super().__init__(username, email)
        self.cart = Cart()
        self._orders = []

    def add_to_cart(self, product, quantity) -> bool:
        """Add to the cart unless the cart would then hold more than the product's stock.

        The check is point-in-time: stock can still drop afterwards, so checkout
        validates again.
        """
        if product is None or not isinstance(quantity, int) or quantity <= 0:
            return False

        already_in_cart = self.cart.quantity_of(product)
        if already_in_cart + quantity > product.stock:
            logger.info(
                "Not enough stock for cart",
                customer=self.username,
                product=product.name,
                requested=quantity,
                in_cart=already_in_cart,
                stock=product.stock,
            )
            return False

        return self.cart.add_item(product, quantity)

    def remove_from_cart(self, product) -> bool:
        return self.cart.remove_item(product)

    def cart_items(self):
        return self.cart.items()

    def record_order(self, order) -> bool:
        if order is None:
            return False
        self._orders.append(order)
        return True

    def order_history(self):
        return list(self._orders)


class Manager(User):
    pass
