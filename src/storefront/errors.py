"""Exceptions raised by the storefront core.

In-core validation failures (bad quantities, empty carts, invalid prices) are
reported as ``False``/``None`` return values. Exceptions are reserved for
construction-time rejection and for I/O at the file boundaries.
"""

from protean.exceptions import ValidationError


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class InvalidProductError(StorefrontError, ValidationError):
    """Raised when a product cannot be constructed from the given fields.

    A protean ``ValidationError``: ``messages`` maps each offending field to a
    list of human-readable reasons.
    """

    def __init__(self, messages: dict[str, list[str]]):
        super().__init__(messages)


class InvalidDiscountError(StorefrontError, ValueError):
    """Raised when a discount strategy is configured out of range."""

    def __init__(self, value: object, reason: str):
        self.value = value
        super().__init__(f"Invalid discount {value!r}: {reason}")


class HistoryStoreError(StorefrontError):
    """Raised when the order history file cannot be written or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Order history I/O failed at {path}: {reason}")


class CatalogFileError(StorefrontError):
    """Raised when a product catalog file cannot be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Catalog file I/O failed at {path}: {reason}")


class UnknownShippingProviderError(StorefrontError, ValueError):
    """Raised when the configured shipping provider name is not recognised."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown shipping provider: {name}")
