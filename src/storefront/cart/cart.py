"""Shopping cart: the lines a customer has selected but not yet checked out.

A cart keeps at most one line per product, in insertion order. Lines hold a
reference to the catalog product, never a copy, so totals always use the
product's current price. The cart does no stock checking; the owning
customer guards additions against the product's stock.
"""

import structlog

logger = structlog.get_logger(__name__)


class CartItem:
    """A product reference and a positive quantity. Equal when the products are equal."""

    __slots__ = ("product", "quantity")

    def __init__(self, product, quantity):
        self.product = product
        self.quantity = quantity if isinstance(quantity, int) and quantity > 0 else 1

    def set_quantity(self, quantity) -> bool:
        if not isinstance(quantity, int) or quantity <= 0:
            return False
        self.quantity = quantity
        return True

    def line_total(self) -> float:
        return self.product.price * self.quantity

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, CartItem):
            return NotImplemented
        return self.product == other.product

    def __hash__(self):
        return hash(self.product)

    def __repr__(self):
        return f"CartItem(product={self.product.name!r}, quantity={self.quantity})"


class Cart:
    def __init__(self):
        self._items = []

    def _line_for(self, product):
        return next((item for item in self._items if item.product is product or item.product == product), None)

    def add_item(self, product, quantity) -> bool:
        """Add ``quantity`` of ``product``, merging into an existing line if there is one."""
        if product is None or not isinstance(quantity, int) or quantity <= 0:
            return False

        existing = self._line_for(product)
        if existing is not None:
            existing.set_quantity(existing.quantity + quantity)
        else:
            self._items.append(CartItem(product, quantity))

        logger.debug("Cart item added", product=product.name, quantity=quantity)
        return True

    def remove_item(self, product) -> bool:
        """Remove the whole line for ``product``, whatever its quantity."""
        if product is None:
            return False

        existing = self._line_for(product)
        if existing is None:
            return False

        self._items.remove(existing)
        return True

    def quantity_of(self, product) -> int:
        existing = self._line_for(product)
        return existing.quantity if existing is not None else 0

    def items(self):
        return list(self._items)

    def calculate_total(self) -> float:
        return sum((item.line_total() for item in self._items), 0.0)

    def clear(self):
        self._items.clear()

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))
