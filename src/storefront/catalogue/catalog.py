"""The ordered list of every product the store knows about.

The catalog does no locking of its own; ``StoreEngine`` serialises access.
Every list it hands out is a copy, so callers cannot reorder or drop products
behind the engine's back.
"""

import structlog

logger = structlog.get_logger(__name__)


class Catalog:
    def __init__(self, products=None):
        self._products = []
        for product in products or []:
            self.add_product(product)

    def __len__(self):
        return len(self._products)

    def __contains__(self, product):
        return any(p is product or p == product for p in self._products)

    def add_product(self, product):
        """Add ``product`` or merge its stock into an existing product of the same name.

        Returns the product now held by the catalog, or ``None`` for a ``None`` input.
        When merging, the incoming object is discarded.
        """
        if product is None:
            return None

        existing = self.find_by_name(product.name)
        if existing is not None:
            if product.stock > 0:
                existing.increase_stock(product.stock)
            logger.debug("Merged product stock", product=existing.name, added=product.stock, stock=existing.stock)
            return existing

        self._products.append(product)
        logger.debug("Added product", product=product.name, category=product.category.value)
        return product

    def find_by_name(self, name):
        if name is None:
            return None
        return next((p for p in self._products if p.matches_name(name)), None)

    def list_available(self):
        return [p for p in self._products if p.stock > 0]

    def list_all(self):
        return list(self._products)

    def remove_product(self, product) -> bool:
        if product is None:
            return False
        for index, candidate in enumerate(self._products):
            if candidate is product or candidate == product:
                del self._products[index]
                return True
        return False
