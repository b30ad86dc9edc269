"""Storefront management CLI.

Inspects the files a storefront process reads and writes, without starting
any sessions.

Usage:
    storefront products [--catalog PATH]
    storefront orders [--history PATH] [--catalog PATH]
"""

import argparse
import sys
from pathlib import Path

from storefront.catalogue.catalog import Catalog
from storefront.catalogue.catalog_file import CatalogFile
from storefront.config import Settings
from storefront.errors import StorefrontError
from storefront.history.store import OrderHistoryStore


def _load_catalog(path):
    catalog_file = CatalogFile(path)
    if not catalog_file.exists():
        return Catalog()
    return Catalog(catalog_file.load())


def list_products(catalog_path):
    """Print every product in the catalog file."""
    catalog = _load_catalog(catalog_path)
    if len(catalog) == 0:
        print(f"No products in {catalog_path}")
        return 0

    for product in catalog.list_all():
        print(f"{product.name:<30} {product.category.name:<12} {product.price:>10.2f} {product.stock:>6}")
    return len(catalog)


def list_orders(history_path, catalog_path):
    """Print every order the history file can still resolve against the catalog."""
    catalog = _load_catalog(catalog_path)
    orders = OrderHistoryStore(history_path).load_all(catalog.find_by_name)
    if not orders:
        print(f"No orders in {history_path}")
        return 0

    for order in orders:
        items = ", ".join(str(item) for item in order.items) or "(no known items)"
        print(f"#{order.order_id:<6} {order.created_at.isoformat()} {order.total_amount:>10.2f}  {items}")
    return len(orders)


def main(argv=None):
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(prog="storefront", description="Storefront management CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    products_parser = subparsers.add_parser("products", help="List the product catalog file")
    products_parser.add_argument("--catalog", type=Path, default=settings.catalog_file)

    orders_parser = subparsers.add_parser("orders", help="List the order history file")
    orders_parser.add_argument("--history", type=Path, default=settings.history_file)
    orders_parser.add_argument("--catalog", type=Path, default=settings.catalog_file)

    args = parser.parse_args(argv)

    try:
        if args.command == "products":
            list_products(args.catalog)
        elif args.command == "orders":
            list_orders(args.history, args.catalog)
    except StorefrontError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
