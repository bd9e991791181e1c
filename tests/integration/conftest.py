"""
Pytest configuration and fixtures for integration tests.
"""

import logging
import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: tests that touch the real file system"
    )


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """
    Setup logging for all tests.

    This fixture runs automatically for all tests and ensures
    log output is captured, and drops any handlers a CLI run installed.
    """
    caplog.set_level(logging.INFO)

    yield

    root = logging.getLogger('tickbars')
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to handle integration test markers.

    This automatically marks all tests in the integration directory
    as 'integration' tests.
    """
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
