"""Storefront context — the process-wide composition root.

Built once at startup and passed to every session; nothing in the package
reaches for a global engine. ``start()`` imports the catalog file (when it
exists) and restores the order history; ``shutdown()`` closes every open
session.

Usage::

    store = Storefront.create().start()
    session = store.open_session(customer=Customer("dana", "dana@example.com"))
    ...
    store.shutdown()
"""

import threading

import structlog

from storefront.catalogue.catalog_file import CatalogFile
from storefront.config import Settings
from storefront.discount.strategy import discount_for
from storefront.engine import StoreEngine
from storefront.history.store import OrderHistoryStore
from storefront.session import StoreSession
from storefront.shipping import build_shipping_provider
from storefront.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(self, settings, engine, history, catalog_file, shipping):
        self.settings = settings
        self.engine = engine
        self.history = history
        self.catalog_file = catalog_file
        self.shipping = shipping
        self._sessions = []
        self._sessions_lock = threading.Lock()

    @classmethod
    def create(cls, settings=None, *, shipping=None, configure_logs=True):
        """Wire a storefront from ``settings`` (read from the environment when omitted)."""
        settings = settings or Settings.from_env()
        if configure_logs:
            configure_logging(env=settings.env, level=settings.log_level, log_dir=settings.log_dir)

        history = OrderHistoryStore(settings.history_file)
        engine = StoreEngine(history_store=history, discount=discount_for(settings.discount_percent))
        return cls(
            settings=settings,
            engine=engine,
            history=history,
            catalog_file=CatalogFile(settings.catalog_file),
            shipping=shipping or build_shipping_provider(settings.shipping_provider),
        )

    def start(self):
        """Load the catalog file and the order history into the engine."""
        if self.catalog_file.exists():
            for product in self.catalog_file.load():
                self.engine.add_product(product)

        restored = self.engine.restore_history()
        logger.info(
            "Storefront started",
            env=self.settings.env,
            products=len(self.engine.all_products()),
            restored_orders=restored,
            discount=self.engine.discount.display_name(),
        )
        return self

    def open_session(self, customer=None, manager=None, *, dispatch=None):
        """Open a session for ``customer`` and/or ``manager``.

        The customer is registered with the engine. When the username is already
        registered, the session uses the registered customer, with its cart and
        order history, instead of ``customer``.
        """
        if customer is not None and not self.engine.register_customer(customer):
            logger.debug("Customer already registered", username=customer.username)
            customer = self.engine.find_customer(customer.username)

        session = StoreSession(
            self.engine,
            customer=customer,
            manager=manager,
            shipping=self.shipping,
            reserve_stock=self.settings.reserve_stock,
            dispatch=dispatch,
        )
        with self._sessions_lock:
            self._sessions.append(session)
        return session

    def close_session(self, session):
        with self._sessions_lock:
            if session in self._sessions:
                self._sessions.remove(session)
        session.close()

    def sessions(self):
        with self._sessions_lock:
            return list(self._sessions)

    def shutdown(self):
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        logger.info("Storefront stopped", closed_sessions=len(sessions))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
