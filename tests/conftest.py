"""
Test Configuration and Fixtures

Shared fixtures for the unit and API suites. Everything runs against the
in-memory stores and a scripted reasoning service; no network or database.
"""

import os

import pytest

# Set test environment variables before importing the app.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from brifify.ledger import IdentityResolver, InMemoryLedgerStore, TokenLedger  # noqa: E402
from tests.support.reasoning import FakeReasoningService  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "api: API endpoint tests")


def pytest_collection_modifyitems(config, items):
    """tests/api/** => api, everything else => unit."""
    for item in items:
        if item.get_closest_marker("api") or item.get_closest_marker("unit"):
            continue
        path = str(getattr(item, "fspath", ""))
        if "/tests/api/" in path:
            item.add_marker(pytest.mark.api)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def identity(ledger_store) -> IdentityResolver:
    return IdentityResolver(ledger_store, starting_tokens=3)


@pytest.fixture
def token_ledger(ledger_store) -> TokenLedger:
    return TokenLedger(ledger_store, starting_tokens=3)


@pytest.fixture
def reasoning() -> FakeReasoningService:
    return FakeReasoningService()
