"""FastShip adapter — maps store orders onto the FastShip delivery API.

``FastShipAPI`` stands in for the external client: its call shape
(``execute_delivery(order_id, recipient, amount)``) is FastShip's, not ours.
``FastShipAdapter`` is the only place that knows about it.
"""

import zlib

import structlog

from storefront.order.order import UNKNOWN_CUSTOMER
from storefront.shipping.port import ShippingProvider

logger = structlog.get_logger(__name__)


class FastShipAPI:
    """Deterministic FastShip client used in development and tests."""

    def __init__(self):
        self.deliveries = []

    def execute_delivery(self, order_id: int, recipient: str | None, amount: float) -> str:
        recipient = recipient or UNKNOWN_CUSTOMER
        tracking = f"FS-{order_id}-{zlib.crc32(recipient.encode('utf-8'))}"
        self.deliveries.append({"order_id": order_id, "recipient": recipient, "amount": amount, "tracking": tracking})
        return tracking


class FastShipAdapter(ShippingProvider):
    def __init__(self, api: FastShipAPI):
        if api is None:
            raise ValueError("FastShip API client is required")
        self._api = api

    def ship_order(self, order) -> str:
        if order is None:
            raise ValueError("order cannot be None")

        tracking = self._api.execute_delivery(order.order_id, order.customer_username, order.total_amount)

        order.pay()
        order.ship()

        logger.info("Order handed to FastShip", order_id=order.order_id, tracking=tracking)
        return tracking
