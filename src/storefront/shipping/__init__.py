"""Shipping provider factory.

Adapters are looked up by the name configured in
``STOREFRONT_SHIPPING_PROVIDER``. FastShip is the only adapter shipped with
the store; tests hand their own ``ShippingProvider`` to the context object.
"""

from storefront.errors import UnknownShippingProviderError
from storefront.shipping.port import ShippingProvider


def build_shipping_provider(name: str) -> ShippingProvider:
    """Construct the adapter registered under ``name``."""
    if name == "fastship":
        from storefront.shipping.fast_ship import FastShipAdapter, FastShipAPI

        return FastShipAdapter(FastShipAPI())
    raise UnknownShippingProviderError(name)
