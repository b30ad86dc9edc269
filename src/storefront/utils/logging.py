"""Logging configuration for the storefront.

Standard-library logging owns the handlers (console plus rotating files);
structlog sits on top of it and renders key-value events. Production and
staging render JSON lines, every other environment uses the rich console
renderer.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_ENVS = ("production", "staging")

_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 5


def get_log_level(env: str, override: str | None = None) -> str:
    """Resolve the log level for an environment, honouring an explicit override."""
    if override:
        return override.upper()
    return _LEVEL_BY_ENV.get(env.lower(), "INFO")


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str, log_dir: Path | None) -> None:
    """Point the root logger at stdout, plus ``storefront.log`` and
    ``storefront_error.log`` under ``log_dir`` when one is given.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setLevel(level)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_handler(log_dir / "storefront.log", level))
        handlers.append(_rotating_handler(log_dir / "storefront_error.log", logging.ERROR))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = handlers


def _renderer(env: str):
    if env.lower() in _JSON_ENVS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def setup_structlog(env: str) -> None:
    """Configure structlog processors for the given environment.

    Every event carries the thread name, so lines from session worker lanes
    can be told apart from the caller's.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.THREAD_NAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(env: str = "development", level: str | None = None, log_dir: Path | None = None) -> None:
    """Configure all logging for a storefront process."""
    setup_stdlib_logging(get_log_level(env, level), log_dir)
    setup_structlog(env)


def add_context(**kwargs: Any) -> None:
    """Bind values included in every later log line from the current thread."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
