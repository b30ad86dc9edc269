"""In-memory retail engine: catalog, carts, orders and order history.

Catalog, per-customer carts, orders with a forward-only status machine,
pluggable discounts and an append-only CSV order history. Start from
``storefront.app.Storefront``.
"""

__version__ = "0.1.0"
