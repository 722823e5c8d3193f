# tests/conftest.py

"""Shared pytest fixtures for the scrapmarket test suite."""

import logging
from collections.abc import Generator
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Backend retry backoff must not slow the suite down."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def detach_log_handlers() -> Generator[None, None, None]:
    """Keep handlers attached by one test from leaking into the next."""
    logger = logging.getLogger("scrapmarket")
    saved = list(logger.handlers)
    yield
    for handler in logger.handlers:
        if handler not in saved:
            handler.close()
    logger.handlers[:] = saved
