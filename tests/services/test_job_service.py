"""
Tests for job persistence and its ledger side effects.
"""

import pytest

from jobledger.services import build_sync_event_bus
from jobledger.services.job_service import (
    create_job,
    delete_job,
    get_job_by_id,
    get_user_jobs,
    update_job,
)
from jobledger.utils.errors import StoreError, ValidationError


async def _new_job(store, status="in_progress", **kwargs):
    return await create_job(
        store=store,
        user_id=kwargs.pop("user_id", "test-user-id"),
        client_id="client-1",
        amount=kwargs.pop("amount", 240.0),
        date=kwargs.pop("date", "2024-01-15"),
        description="Deep clean",
        status=status,
        event_bus=build_sync_event_bus(store),
        **kwargs,
    )


class TestCreateJob:

    @pytest.mark.asyncio
    async def test_create_in_progress_job_has_no_transaction(self, memory_store, rows):
        job = await _new_job(memory_store)

        assert job["id"]
        assert job["status"] == "in_progress"
        assert job["user_id"] == "test-user-id"
        assert rows(memory_store, "transactions") == []

    @pytest.mark.asyncio
    async def test_create_completed_job_books_income(self, memory_store, rows):
        job = await _new_job(memory_store, status="completed")

        transactions = rows(memory_store, "transactions")
        assert len(transactions) == 1
        assert transactions[0]["job_id"] == job["id"]
        assert transactions[0]["type"] == "income"

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(self, memory_store, rows):
        with pytest.raises(ValidationError):
            await _new_job(memory_store, status="done")

        assert rows(memory_store, "jobs") == []

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, memory_store):
        with pytest.raises(ValidationError):
            await _new_job(memory_store, amount=-1)

    @pytest.mark.asyncio
    async def test_store_failure_raises(self, failing_store):
        failing_store.fail("create", "jobs")

        with pytest.raises(StoreError):
            await _new_job(failing_store)

    @pytest.mark.asyncio
    async def test_sync_failure_does_not_fail_job(self, failing_store, rows):
        """The job is persisted even when its ledger entry cannot be written."""
        failing_store.fail("create", "transactions")

        job = await _new_job(failing_store, status="completed")

        assert job["status"] == "completed"
        assert len(rows(failing_store, "jobs")) == 1
        assert rows(failing_store, "transactions") == []


class TestUpdateJob:

    @pytest.mark.asyncio
    async def test_completing_and_reopening(self, memory_store, rows):
        job = await _new_job(memory_store)
        bus = build_sync_event_bus(memory_store)

        await update_job(memory_store, "test-user-id", job["id"], status="completed", event_bus=bus)

        transactions = rows(memory_store, "transactions")
        assert len(transactions) == 1
        assert transactions[0]["amount"] == 240.0

        await update_job(memory_store, "test-user-id", job["id"], status="in_progress", event_bus=bus)

        assert rows(memory_store, "transactions") == []

    @pytest.mark.asyncio
    async def test_editing_completed_job_mirrors_transaction(self, memory_store, rows):
        job = await _new_job(memory_store, status="completed")

        await update_job(
            memory_store, "test-user-id", job["id"],
            amount=310.0, description="Deep clean + oven",
            event_bus=build_sync_event_bus(memory_store),
        )

        txn = rows(memory_store, "transactions")[0]
        assert txn["amount"] == 310.0
        assert txn["description"] == "Service rendered — Deep clean + oven"

    @pytest.mark.asyncio
    async def test_no_fields_returns_existing(self, memory_store):
        job = await _new_job(memory_store)

        result = await update_job(memory_store, "test-user-id", job["id"])

        assert result == job

    @pytest.mark.asyncio
    async def test_other_users_job_not_found(self, memory_store):
        job = await _new_job(memory_store)

        result = await update_job(memory_store, "other-user-id", job["id"], status="completed")

        assert result is None

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(self, memory_store):
        job = await _new_job(memory_store)

        with pytest.raises(ValidationError):
            await update_job(memory_store, "test-user-id", job["id"], status="finished")


class TestReadAndDelete:

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_filtered(self, memory_store):
        await _new_job(memory_store, date="2024-01-01")
        await _new_job(memory_store, date="2024-03-01", status="completed")
        await _new_job(memory_store, date="2024-02-01")
        await _new_job(memory_store, user_id="other-user-id")

        jobs = await get_user_jobs(memory_store, "test-user-id")
        completed = await get_user_jobs(memory_store, "test-user-id", status="completed")

        assert [job["date"] for job in jobs] == ["2024-03-01", "2024-02-01", "2024-01-01"]
        assert [job["date"] for job in completed] == ["2024-03-01"]

    @pytest.mark.asyncio
    async def test_get_job_scoped_to_owner(self, memory_store):
        job = await _new_job(memory_store)

        assert await get_job_by_id(memory_store, "test-user-id", job["id"]) == job
        assert await get_job_by_id(memory_store, "other-user-id", job["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_job(self, memory_store):
        job = await _new_job(memory_store)

        assert await delete_job(memory_store, "test-user-id", job["id"]) is True
        assert await delete_job(memory_store, "test-user-id", job["id"]) is False
