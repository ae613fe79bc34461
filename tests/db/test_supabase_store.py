"""
Tests for the Supabase-backed record store.

The Supabase query builder is mocked; these tests check which PostgREST
calls are made and how responses/errors become Ok/Err.
"""

import pytest
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from jobledger.db.store import SupabaseRecordStore
from jobledger.utils.errors import NotFoundError, StoreError
from jobledger.utils.result import Err, Ok


def _response(data):
    response = MagicMock()
    response.data = data
    return response


class TestSupabaseRecordStore:

    @pytest.mark.asyncio
    async def test_create_returns_inserted_row(self, supabase_client):
        row = {"id": "job-1", "user_id": "u"}
        supabase_client.table.return_value.insert.return_value.execute.return_value = _response([row])
        store = SupabaseRecordStore(supabase_client)

        result = await store.create("jobs", {"user_id": "u"})

        assert result == Ok(row)
        supabase_client.table.assert_called_with("jobs")
        supabase_client.table.return_value.insert.assert_called_once_with({"user_id": "u"})

    @pytest.mark.asyncio
    async def test_create_with_no_data_is_store_error(self, supabase_client):
        supabase_client.table.return_value.insert.return_value.execute.return_value = _response([])
        store = SupabaseRecordStore(supabase_client)

        result = await store.create("jobs", {"user_id": "u"})

        assert isinstance(result.error, StoreError)

    @pytest.mark.asyncio
    async def test_api_error_code_is_kept(self, supabase_client):
        error = APIError({"message": "duplicate key value", "code": "23505"})
        supabase_client.table.return_value.insert.return_value.execute.side_effect = error
        store = SupabaseRecordStore(supabase_client)

        result = await store.create("categories", {"name": "Tools"})

        assert isinstance(result, Err)
        assert result.error.code == "23505"

    @pytest.mark.asyncio
    async def test_get_by_id(self, supabase_client):
        query = supabase_client.table.return_value.select.return_value.eq.return_value
        query.execute.return_value = _response([{"id": "job-1"}])
        store = SupabaseRecordStore(supabase_client)

        result = await store.get_by_id("jobs", "job-1")

        assert result == Ok({"id": "job-1"})
        supabase_client.table.return_value.select.return_value.eq.assert_called_once_with("id", "job-1")

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, supabase_client):
        query = supabase_client.table.return_value.select.return_value.eq.return_value
        query.execute.return_value = _response([])
        store = SupabaseRecordStore(supabase_client)

        assert await store.get_by_id("jobs", "missing") == Ok(None)

    @pytest.mark.asyncio
    async def test_update_without_rows_is_not_found(self, supabase_client):
        query = supabase_client.table.return_value.update.return_value.eq.return_value
        query.execute.return_value = _response([])
        store = SupabaseRecordStore(supabase_client)

        result = await store.update("transactions", "txn-1", {"amount": 5})

        assert isinstance(result.error, NotFoundError)

    @pytest.mark.asyncio
    async def test_delete(self, supabase_client):
        query = supabase_client.table.return_value.delete.return_value.eq.return_value
        query.execute.return_value = _response([{"id": "txn-1"}])
        store = SupabaseRecordStore(supabase_client)

        assert await store.delete("transactions", "txn-1") == Ok(True)

    @pytest.mark.asyncio
    async def test_delete_failure(self, supabase_client):
        query = supabase_client.table.return_value.delete.return_value.eq.return_value
        query.execute.side_effect = RuntimeError("network down")
        store = SupabaseRecordStore(supabase_client)

        result = await store.delete("transactions", "txn-1")

        assert isinstance(result.error, StoreError)
        assert "network down" in result.error.message

    @pytest.mark.asyncio
    async def test_find_where_uses_is_null_for_none(self):
        client = MagicMock()
        query = MagicMock()
        client.table.return_value.select.return_value = query
        query.eq.return_value = query
        query.is_.return_value = query
        query.execute.return_value = _response([{"id": "txn-1"}])
        store = SupabaseRecordStore(client)

        result = await store.find_where("transactions", {"user_id": "u", "job_id": None})

        assert result == Ok([{"id": "txn-1"}])
        query.eq.assert_called_once_with("user_id", "u")
        query.is_.assert_called_once_with("job_id", "null")
