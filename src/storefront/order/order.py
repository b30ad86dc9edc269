"""Order — an immutable snapshot of a cart at checkout, plus a mutable status.

State machine::

    NEW -> PAID -> SHIPPED -> DELIVERED

``ship()`` and ``deliver()`` only move forward one step from the exact
preceding state. ``pay()`` forces ``PAID`` from any state, including
``SHIPPED`` and ``DELIVERED``; callers that need a stricter rule must check
``status`` first. There is no cancellation or refund.

Everything except ``status`` is frozen once the order exists. Orders are
equal when their ids are equal.
"""

import threading
from datetime import datetime
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from storefront.catalogue.product import Category

logger = structlog.get_logger(__name__)

UNKNOWN_CUSTOMER = "UNKNOWN"


class OrderStatus(Enum):
    NEW = "New"
    PAID = "Paid"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"


def _now():
    return datetime.now().replace(microsecond=0)


class OrderItem(BaseModel):
    """One order line: what was bought, at which unit price, how many."""

    model_config = ConfigDict(frozen=True)

    product_name: str = Field(min_length=1)
    category: Category | None = None
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)

    @classmethod
    def from_cart_item(cls, item):
        return cls(
            product_name=item.product.name,
            category=item.product.category,
            unit_price=item.product.price,
            quantity=item.quantity,
        )

    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"


class Order(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    order_id: int = Field(frozen=True)
    customer_username: str = Field(default=UNKNOWN_CUSTOMER, frozen=True)
    items: tuple[OrderItem, ...] = Field(default=(), frozen=True)
    total_amount: float = Field(ge=0, frozen=True)
    created_at: datetime = Field(default_factory=_now, frozen=True)
    status: OrderStatus = OrderStatus.NEW

    _transition_lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    @field_validator("customer_username", mode="before")
    @classmethod
    def blank_username_is_unknown(cls, value):
        if value is None or not str(value).strip():
            return UNKNOWN_CUSTOMER
        return value

    @field_validator("created_at")
    @classmethod
    def truncate_to_seconds(cls, value):
        return value.replace(microsecond=0)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def from_cart_items(cls, order_id, customer_username, cart_items, total_amount, created_at=None):
        """Create a ``NEW`` order from cart lines, snapshotting name, price and quantity."""
        return cls(
            order_id=order_id,
            customer_username=customer_username,
            items=tuple(OrderItem.from_cart_item(item) for item in cart_items),
            total_amount=total_amount,
            created_at=created_at or _now(),
        )

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def pay(self) -> bool:
        with self._transition_lock:
            previous = self.status
            self.status = OrderStatus.PAID

        if previous not in (OrderStatus.NEW, OrderStatus.PAID):
            logger.warning("Order forced back to paid", order_id=self.order_id, previous=previous.value)
        else:
            logger.info("Order paid", order_id=self.order_id)
        return True

    def ship(self) -> bool:
        return self._advance(OrderStatus.PAID, OrderStatus.SHIPPED)

    def deliver(self) -> bool:
        return self._advance(OrderStatus.SHIPPED, OrderStatus.DELIVERED)

    def _advance(self, required, target) -> bool:
        with self._transition_lock:
            if self.status != required:
                current = self.status
                moved = False
            else:
                self.status = target
                moved = True

        if not moved:
            logger.info(
                "Order transition refused",
                order_id=self.order_id,
                current=current.value,
                target=target.value,
            )
            return False

        logger.info("Order status changed", order_id=self.order_id, status=target.value)
        return True

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Order):
            return NotImplemented
        return self.order_id == other.order_id

    def __hash__(self):
        return hash(self.order_id)

    def __str__(self):
        lines = [
            f"Order ID: {self.order_id}",
            f"Customer: {self.customer_username}",
            f"Status: {self.status.value}",
            f"Total Amount: {self.total_amount:.2f}",
            "Items:",
        ]
        lines += [f" - {item}" for item in self.items]
        return "\n".join(lines)
