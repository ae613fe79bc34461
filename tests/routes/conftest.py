"""
Fixtures for route tests: authenticated TestClient backed by an in-memory store.
"""

from contextlib import ExitStack
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.main import app

ROUTE_MODULES = (
    "jobledger.routes.jobs",
    "jobledger.routes.expenses",
    "jobledger.routes.transactions",
    "jobledger.routes.categories",
    "jobledger.routes.clients",
    "jobledger.routes.reports",
)


async def mock_get_authenticated_user_dependency():
    """Mock dependency that returns test AuthenticatedUser."""
    return AuthenticatedUser(
        user_id="test-user-id",
        access_token="test-access-token"
    )


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def mock_auth():
    """Override get_authenticated_user dependency."""
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def routed_store(memory_store):
    """Make every router use the test's in-memory store."""
    with ExitStack() as stack:
        for module in ROUTE_MODULES:
            stack.enter_context(patch(f"{module}.get_record_store", return_value=memory_store))
        yield memory_store


@pytest.fixture
def api(client, mock_auth, routed_store):
    return client
