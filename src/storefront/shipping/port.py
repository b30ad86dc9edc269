"""Shipping port — the one capability the store needs from a shipping company.

The core only ever calls ``ship_order``. Adapters translate it onto whatever
API the shipping company exposes.
"""

from abc import ABC, abstractmethod


class ShippingProvider(ABC):
    """Abstract interface for shipping adapters."""

    @abstractmethod
    def ship_order(self, order) -> str:
        """Hand ``order`` over for delivery.

        Implementations move the order through ``pay()`` and ``ship()``.

        Returns:
            The provider's tracking code for the shipment.
        """
        ...
