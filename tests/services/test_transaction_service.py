"""
Tests for organic transaction CRUD and the completed-job guard.
"""

import pytest

from jobledger.services import build_sync_event_bus
from jobledger.services.job_service import create_job, update_job
from jobledger.services.transaction_service import (
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_user_transactions,
    update_transaction,
)
from jobledger.utils.errors import ForbiddenError, StoreError, ValidationError


async def _organic(store, **overrides):
    params = {
        "user_id": "test-user-id",
        "category_id": "category-789",
        "transaction_type": "expense",
        "amount": 128.50,
        "date": "2024-01-15",
        "description": "Van fuel",
    }
    params.update(overrides)
    return await create_transaction(store=store, **params)


async def _completed_job_transaction(store, rows):
    job = await create_job(
        store, "test-user-id", "client-1", 240.0, "2024-01-15",
        description="Deep clean", status="completed",
        event_bus=build_sync_event_bus(store),
    )
    return job, rows(store, "transactions")[0]


class TestCreateTransaction:

    @pytest.mark.asyncio
    async def test_create_is_organic(self, memory_store):
        txn = await _organic(memory_store)

        assert txn["is_derived"] is False
        assert txn["job_id"] is None
        assert txn["expense_id"] is None
        assert txn["type"] == "expense"

    @pytest.mark.asyncio
    async def test_invalid_type_rejected(self, memory_store):
        with pytest.raises(ValidationError):
            await _organic(memory_store, transaction_type="outcome")

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, memory_store):
        with pytest.raises(ValidationError):
            await _organic(memory_store, amount=-1.0)


class TestListTransactions:

    @pytest.mark.asyncio
    async def test_filters_sorting_and_paging(self, memory_store, rows):
        await _organic(memory_store, date="2024-01-01", amount=10.0)
        await _organic(memory_store, date="2024-02-01", amount=30.0, transaction_type="income")
        await _organic(memory_store, date="2024-03-01", amount=20.0)
        await _organic(memory_store, user_id="other-user-id")
        await _completed_job_transaction(memory_store, rows)

        all_txns = await get_user_transactions(memory_store, "test-user-id")
        assert [t["date"] for t in all_txns] == [
            "2024-03-01", "2024-02-01", "2024-01-15", "2024-01-01"
        ]

        derived = await get_user_transactions(memory_store, "test-user-id", is_derived=True)
        assert [t["amount"] for t in derived] == [240.0]

        expenses = await get_user_transactions(memory_store, "test-user-id", transaction_type="expense")
        assert len(expenses) == 2

        by_amount = await get_user_transactions(
            memory_store, "test-user-id", sort_by="amount", sort_order="asc", is_derived=False
        )
        assert [t["amount"] for t in by_amount] == [10.0, 20.0, 30.0]

        ranged = await get_user_transactions(
            memory_store, "test-user-id", from_date="2024-01-10", to_date="2024-02-28"
        )
        assert [t["date"] for t in ranged] == ["2024-02-01", "2024-01-15"]

        page = await get_user_transactions(memory_store, "test-user-id", limit=2, offset=1)
        assert [t["date"] for t in page] == ["2024-02-01", "2024-01-15"]

    @pytest.mark.asyncio
    async def test_get_scoped_to_owner(self, memory_store):
        txn = await _organic(memory_store)

        assert await get_transaction_by_id(memory_store, "test-user-id", txn["id"]) == txn
        assert await get_transaction_by_id(memory_store, "other-user-id", txn["id"]) is None


class TestGuardedMutations:

    @pytest.mark.asyncio
    async def test_update_organic_transaction(self, memory_store):
        txn = await _organic(memory_store)

        updated = await update_transaction(memory_store, "test-user-id", txn["id"], amount=99.0)

        assert updated["amount"] == 99.0

    @pytest.mark.asyncio
    async def test_delete_organic_transaction(self, memory_store):
        txn = await _organic(memory_store)

        assert await delete_transaction(memory_store, "test-user-id", txn["id"]) is True
        assert await get_transaction_by_id(memory_store, "test-user-id", txn["id"]) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("changes", [{"amount": 1.0}, {"description": "typo fix"}, {"date": "2024-01-16"}])
    async def test_update_completed_job_transaction_forbidden(self, memory_store, rows, changes):
        """Rejected regardless of which field is changed."""
        _, txn = await _completed_job_transaction(memory_store, rows)

        with pytest.raises(ForbiddenError):
            await update_transaction(memory_store, "test-user-id", txn["id"], **changes)

        assert rows(memory_store, "transactions")[0] == txn

    @pytest.mark.asyncio
    async def test_delete_completed_job_transaction_forbidden(self, memory_store, rows):
        _, txn = await _completed_job_transaction(memory_store, rows)

        with pytest.raises(ForbiddenError):
            await delete_transaction(memory_store, "test-user-id", txn["id"])

        assert len(rows(memory_store, "transactions")) == 1

    @pytest.mark.asyncio
    async def test_transaction_editable_while_job_reopened(self, memory_store, rows):
        """A derived row whose job left 'completed' before deletion is no longer guarded."""
        job, txn = await _completed_job_transaction(memory_store, rows)
        # Reopen without the bus so the derived row survives
        await update_job(memory_store, "test-user-id", job["id"], status="in_progress")

        updated = await update_transaction(memory_store, "test-user-id", txn["id"], amount=5.0)

        assert updated["amount"] == 5.0

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, memory_store):
        assert await update_transaction(memory_store, "test-user-id", "missing", amount=1.0) is None
        assert await delete_transaction(memory_store, "test-user-id", "missing") is False

    @pytest.mark.asyncio
    async def test_guard_store_failure_blocks_delete(self, failing_store, rows):
        _, txn = await _completed_job_transaction(failing_store, rows)
        failing_store.fail("get_by_id", "jobs")

        with pytest.raises(StoreError):
            await delete_transaction(failing_store, "test-user-id", txn["id"])

        assert len(rows(failing_store, "transactions")) == 1
