"""Product catalog CSV file — bulk import and export of the catalog.

Layout (header always written, never required on read)::

    name,price,stock,description,category,imagePath
    Laptop,3500.00,5,Light and fast,ELECTRONICS,images/laptop.jpg

Rows that cannot become a product are skipped. Unknown categories fall back
to electronics and a missing image path falls back to the default image.
The file has its own lock, independent of the engine lock.
"""

import threading
from pathlib import Path

import structlog

from storefront.catalogue.factory import create_product_with_defaults, parse_category
from storefront.catalogue.product import DEFAULT_IMAGE, Category
from storefront.errors import CatalogFileError, InvalidProductError

logger = structlog.get_logger(__name__)

HEADER = "name,price,stock,description,category,imagePath"


def _parse_row(line):
    parts = line.split(",")
    if len(parts) < 5:
        return None

    try:
        price = float(parts[1].strip())
        stock = int(parts[2].strip())
    except ValueError:
        return None

    category = parse_category(parts[4], default=Category.ELECTRONICS)
    image_path = parts[5].strip() if len(parts) >= 6 and parts[5].strip() else DEFAULT_IMAGE

    try:
        return create_product_with_defaults(
            category,
            {
                "name": parts[0].strip(),
                "price": price,
                "stock": stock,
                "description": parts[3].strip(),
                "image_path": image_path,
            },
        )
    except InvalidProductError as exc:
        logger.warning("Skipping invalid catalog row", row=line, errors=exc.messages)
        return None


def _format_row(product):
    description = (product.description or "").strip().replace(",", " ")
    return (
        f"{product.name.strip()},{product.price:.2f},{product.stock},{description},"
        f"{product.category.name},{(product.image_path or '').strip()}"
    )


class CatalogFile:
    """Reads and writes the product catalog file at ``path``."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self):
        """Parse the file into products. Raises ``CatalogFileError`` if it cannot be read."""
        products = []
        with self._lock:
            try:
                with self.path.open("r", encoding="utf-8") as handle:
                    for raw in handle:
                        line = raw.strip()
                        if not line:
                            continue
                        if line.lower() == HEADER.lower():
                            continue
                        product = _parse_row(line)
                        if product is None:
                            logger.debug("Skipped catalog row", row=line)
                            continue
                        products.append(product)
            except OSError as exc:
                raise CatalogFileError(str(self.path), str(exc)) from exc

        logger.info("Loaded catalog file", path=str(self.path), products=len(products))
        return products

    def save(self, products):
        """Write ``products`` to the file, replacing its contents."""
        with self._lock:
            try:
                with self.path.open("w", encoding="utf-8") as handle:
                    handle.write(HEADER + "\n")
                    for product in products or []:
                        if product is None:
                            continue
                        handle.write(_format_row(product) + "\n")
            except OSError as exc:
                raise CatalogFileError(str(self.path), str(exc)) from exc

        logger.info("Saved catalog file", path=str(self.path))
