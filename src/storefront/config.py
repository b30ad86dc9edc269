"""Runtime settings for a storefront process.

Settings are read once at startup from ``STOREFRONT_*`` environment variables
and handed to the ``Storefront`` context object. Nothing else in the package
reads the environment.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    env: str = "development"
    history_file: Path = Path("orders_history.csv")
    catalog_file: Path = Path("products_catalog.csv")
    discount_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    reserve_stock: bool = True
    shipping_provider: str = "fastship"
    log_level: str | None = None
    log_dir: Path | None = Path("logs")

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values = {}

        if "STOREFRONT_ENV" in environ:
            values["env"] = environ["STOREFRONT_ENV"]
        if "STOREFRONT_HISTORY_FILE" in environ:
            values["history_file"] = Path(environ["STOREFRONT_HISTORY_FILE"])
        if "STOREFRONT_CATALOG_FILE" in environ:
            values["catalog_file"] = Path(environ["STOREFRONT_CATALOG_FILE"])
        if "STOREFRONT_DISCOUNT_PERCENT" in environ:
            values["discount_percent"] = float(environ["STOREFRONT_DISCOUNT_PERCENT"])
        if "STOREFRONT_RESERVE_STOCK" in environ:
            values["reserve_stock"] = environ["STOREFRONT_RESERVE_STOCK"].strip().lower() in _TRUTHY
        if "STOREFRONT_SHIPPING_PROVIDER" in environ:
            values["shipping_provider"] = environ["STOREFRONT_SHIPPING_PROVIDER"]
        if "LOG_LEVEL" in environ:
            values["log_level"] = environ["LOG_LEVEL"]
        if "LOG_DIR" in environ:
            values["log_dir"] = Path(environ["LOG_DIR"]) if environ["LOG_DIR"] else None

        return cls(**values)
