"""Append-only CSV record of every order placed.

One order per line, no header::

    <order_id>,<total, 2 decimals>,<created_at, ISO local>,<name> x<qty>;<name> x<qty>;

The history only records ids, totals, timestamps and item quantities, so a
reloaded order starts again at ``NEW`` with an unknown customer. Loading is
best effort: lines whose id or total do not parse are skipped, an unreadable
timestamp becomes "now", and item tokens naming products the catalog does
not know are dropped.

Lines in the owner-prefixed layout written by older releases
(``<username>,<order_id>,<total>,<created_at>,<items>``) are still read; that
layout is tried first and the plain layout is the fallback.

A single lock per store serialises appends and file reads. It may be taken
while the engine lock is held, never the other way round: loads call
``lookup`` only after releasing it.
"""

import math
import threading
from datetime import datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from storefront.errors import HistoryStoreError
from storefront.order.order import UNKNOWN_CUSTOMER, Order, OrderItem

logger = structlog.get_logger(__name__)

ITEM_SEPARATOR = ";"
QUANTITY_SEPARATOR = " x"


# ---------------------------------------------------------------------------
# Line codec
# ---------------------------------------------------------------------------
def format_items(items) -> str:
    return "".join(
        f"{item.product_name.replace(',', ' ')}{QUANTITY_SEPARATOR}{item.quantity}{ITEM_SEPARATOR}" for item in items
    )


def format_order_line(order) -> str:
    return f"{order.order_id},{order.total_amount:.2f},{order.created_at.isoformat()},{format_items(order.items)}"


def _parse_timestamp(text):
    try:
        return datetime.fromisoformat(text.strip()).replace(microsecond=0)
    except ValueError:
        return datetime.now().replace(microsecond=0)


def parse_items(summary, lookup):
    """Turn ``"A x1;B x2;"`` into order lines, dropping tokens that do not resolve."""
    items = []
    for token in (summary or "").split(ITEM_SEPARATOR):
        token = token.strip()
        if not token:
            continue

        name, separator, quantity_text = token.rpartition(QUANTITY_SEPARATOR)
        if not separator or not name.strip():
            continue
        try:
            quantity = int(quantity_text.strip())
        except ValueError:
            continue
        if quantity <= 0:
            continue

        product = lookup(name.strip())
        if product is None:
            logger.debug("Dropped history item for unknown product", product=name.strip())
            continue

        items.append(
            OrderItem(
                product_name=product.name,
                category=product.category,
                unit_price=product.price,
                quantity=quantity,
            )
        )
    return items


def _build_order(username, id_text, total_text, created_text, summary, lookup):
    try:
        order_id = int(id_text.strip())
        total = float(total_text.strip())
    except ValueError:
        return None
    if not math.isfinite(total):
        return None

    try:
        return Order(
            order_id=order_id,
            customer_username=username,
            items=tuple(parse_items(summary, lookup)),
            total_amount=total,
            created_at=_parse_timestamp(created_text),
        )
    except ValidationError:
        return None


def parse_order_line(line, lookup):
    """Parse one history line into an ``Order``, or ``None`` when the line is unusable."""
    parts = line.split(",", 4)
    if len(parts) == 5:
        order = _build_order(parts[0].strip(), parts[1], parts[2], parts[3], parts[4], lookup)
        if order is not None:
            return order

    parts = line.split(",", 3)
    if len(parts) < 4:
        return None
    return _build_order(UNKNOWN_CUSTOMER, parts[0], parts[1], parts[2], parts[3], lookup)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class OrderHistoryStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, order):
        """Append ``order`` as one line. The file is opened and closed on every call."""
        if order is None:
            return

        line = format_order_line(order)
        with self._lock:
            try:
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as exc:
                raise HistoryStoreError(str(self.path), str(exc)) from exc

        logger.debug("Order appended to history", order_id=order.order_id, path=str(self.path))

    def load_all(self, lookup):
        """Read every parsable order. ``lookup`` maps a product name to a catalog product or ``None``."""
        with self._lock:
            if not self.path.is_file():
                return []

            try:
                with self.path.open("r", encoding="utf-8") as handle:
                    lines = [raw.strip() for raw in handle]
            except OSError as exc:
                raise HistoryStoreError(str(self.path), str(exc)) from exc

        # Parsing runs with the file lock released; ``lookup`` may take the engine lock
        orders = []
        skipped = 0
        for line in lines:
            if not line:
                continue
            order = parse_order_line(line, lookup)
            if order is None:
                skipped += 1
                logger.warning("Skipping unparsable history line", line=line)
                continue
            orders.append(order)

        logger.info("Loaded order history", path=str(self.path), orders=len(orders), skipped=skipped)
        return orders

    def clear(self):
        """Delete the history file if it exists."""
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                raise HistoryStoreError(str(self.path), str(exc)) from exc
