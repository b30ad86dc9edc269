import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pins the storefront environment and configures logging for it, so only
    warnings and errors reach the console during the run.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env

    from storefront.utils.logging import configure_logging

    configure_logging(env=session.config.option.env, log_dir=None)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests touch the filesystem
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Drop any structlog context a test bound on its thread."""
    yield

    from storefront.utils.logging import clear_context

    clear_context()
