"""Engine notifications — what changed in the store, published after each mutation.

Sessions subscribe a listener and re-render when something arrives. Events
are immutable records; listeners are called on the publishing thread, after
the engine has released its lock, so a listener may call back into the
engine. A failing listener is logged and does not stop delivery to the
others.
"""

import threading
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger(__name__)


class StoreEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    occurred_at: datetime = Field(default_factory=datetime.now)


class ProductAdded(StoreEvent):
    """A new product entered the catalog, or stock was merged into an existing one."""

    product_name: str
    stock: int
    merged: bool = False


class ProductRemoved(StoreEvent):
    product_name: str


class StockChanged(StoreEvent):
    product_name: str
    previous_stock: int
    new_stock: int


class PriceChanged(StoreEvent):
    product_name: str
    previous_price: float
    new_price: float


class CustomerRegistered(StoreEvent):
    username: str


class OrderPlaced(StoreEvent):
    order_id: int
    customer_username: str
    total_amount: float
    item_count: int


class OrderStatusChanged(StoreEvent):
    order_id: int
    status: str


class HistoryRestored(StoreEvent):
    restored: int


class EventChannel:
    """Fan-out of store events to subscribed listeners."""

    def __init__(self):
        self._listeners = []
        self._lock = threading.Lock()

    def subscribe(self, listener):
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener) -> bool:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
                return True
        return False

    def publish(self, event):
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed", event_type=type(event).__name__)
