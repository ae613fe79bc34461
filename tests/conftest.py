"""
Pytest configuration for Job Ledger backend tests.

Sets up test environment and global fixtures.
"""
import os
import pytest
from unittest.mock import MagicMock

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")

from jobledger.db.memory import InMemoryRecordStore  # noqa: E402
from jobledger.services.category_resolver import CategoryResolver  # noqa: E402
from jobledger.services.sync_service import DerivedTransactionSynchronizer  # noqa: E402
from jobledger.utils.errors import StoreError  # noqa: E402
from jobledger.utils.result import Err  # noqa: E402

USER_ID = "test-user-id"
OTHER_USER_ID = "other-user-id"


class FailingStore(InMemoryRecordStore):
    """
    In-memory store that fails chosen operations on chosen tables.

    ``failures`` maps (operation, table) to the StoreError code to report,
    e.g. ("create", "transactions") -> None.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failures = {}

    def fail(self, operation: str, table: str, code=None) -> None:
        self.failures[(operation, table)] = code

    def _failure(self, operation: str, table: str):
        if (operation, table) in self.failures:
            return Err(StoreError(
                f"{operation} on {table} failed: simulated outage",
                code=self.failures[(operation, table)],
            ))
        return None

    async def create(self, table, record):
        return self._failure("create", table) or await super().create(table, record)

    async def get_by_id(self, table, record_id):
        return self._failure("get_by_id", table) or await super().get_by_id(table, record_id)

    async def update(self, table, record_id, changes):
        return self._failure("update", table) or await super().update(table, record_id, changes)

    async def delete(self, table, record_id):
        return self._failure("delete", table) or await super().delete(table, record_id)

    async def find_where(self, table, filters):
        return self._failure("find_where", table) or await super().find_where(table, filters)


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def synchronizer(memory_store):
    return DerivedTransactionSynchronizer(memory_store, CategoryResolver(memory_store))


@pytest.fixture
def make_job():
    """Factory inserting a job row directly into an in-memory store."""
    def _make_job(store: InMemoryRecordStore, status: str = "in_progress", **overrides) -> dict:
        job = {
            "id": overrides.pop("id", "job-1"),
            "user_id": USER_ID,
            "client_id": "client-1",
            "amount": 240.0,
            "status": status,
            "date": "2024-01-15",
            "description": "Deep clean",
            "location": None,
            "created_at": "2024-01-10T09:00:00+00:00",
            "updated_at": None,
        }
        job.update(overrides)
        store.tables.setdefault("jobs", {})[job["id"]] = dict(job)
        return dict(job)

    return _make_job


@pytest.fixture
def rows():
    """Read a table of an in-memory store as a list of rows."""
    def _rows(store: InMemoryRecordStore, table: str) -> list:
        return list(store.tables.get(table, {}).values())

    return _rows
