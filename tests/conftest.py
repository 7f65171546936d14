"""Pytest configuration and shared fixtures for ccTracker tests."""

from __future__ import annotations

import logging
import os

import pytest

from cctracker.observability import RecordingObserver
from cctracker.storage.memory import InMemorySwarmStore


def pytest_configure(config):
    """Register project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("asyncio", "marks tests as async"),
        ("unit", "marks tests as unit tests"),
        ("integration", "marks tests as integration tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _clear_tracker_env(monkeypatch):
    """Keep CCTRACKER_* variables from the host out of config tests."""
    for name in list(os.environ):
        if name.startswith("CCTRACKER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    # setup_logging turns propagation off for these
    for name in ("cctracker", "aiohttp.access"):
        logging.getLogger(name).propagate = True

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemorySwarmStore()


@pytest.fixture
def observer():
    """Observer recording every announce event."""
    return RecordingObserver()


@pytest.fixture
def announce_query():
    """Factory for a well-formed announce query, with selected fields replaced.

    Passing None for a field drops it from the query.
    """

    def _make(**overrides):
        query = {
            "info_hash": "AB",
            "peer_id": "CD",
            "port": "6881",
            "ip": "2130706433",
            "dc": "sjc1",
            "downloaded": "0",
            "uploaded": "0",
            "left": "1000",
            "event": "started",
        }
        query.update(overrides)
        return {k: v for k, v in query.items() if v is not None}

    return _make
