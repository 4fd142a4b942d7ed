"""
tests/conftest.py - Shared fixtures for the test suite.
"""

from __future__ import annotations

import logging

import pytest

from restwalk.client import ApiClient
from tests.fakes import BASE_URL, PagedService

# Fast enough that cooldowns never dominate a test
TEST_RPS = 1000


@pytest.fixture
def make_api():
    """Factory building an ApiClient wired to a fake service."""

    def _make(service: PagedService, **kwargs) -> ApiClient:
        kwargs.setdefault("max_requests_per_second", TEST_RPS)
        return ApiClient(BASE_URL, transport=service.transport(), **kwargs)

    return _make


@pytest.fixture(autouse=True)
def reset_restwalk_logger():
    """Drop handlers installed by setup_logging between tests."""
    yield
    logger = logging.getLogger("restwalk")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
