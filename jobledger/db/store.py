"""
Generic record store used by every service and by the synchronizer.

All operations are keyed by table name and row id and return a tagged
``Result`` instead of raising, so callers decide whether a failure is fatal
(primary mutations) or only logged (derived-record synchronization).

Owner scoping: RLS enforces user_id = auth.uid() on the Supabase side.
Services still pass ``user_id`` as a filter key wherever they look rows up,
so the same code is correct against stores without RLS.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, cast

from supabase import Client

from jobledger.utils.errors import NotFoundError, StoreError
from jobledger.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordStore(Protocol):
    """Create/read/update/delete collaborator, generic over table name."""

    async def create(self, table: str, record: Record) -> Result[Record]:
        ...

    async def get_by_id(self, table: str, record_id: str) -> Result[Optional[Record]]:
        ...

    async def update(self, table: str, record_id: str, changes: Record) -> Result[Record]:
        ...

    async def delete(self, table: str, record_id: str) -> Result[bool]:
        ...

    async def find_where(self, table: str, filters: Record) -> Result[List[Record]]:
        ...


def _store_error(operation: str, table: str, exc: Exception) -> Err:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    logger.error(f"Store {operation} on '{table}' failed (code={code}): {message}")
    return Err(StoreError(f"{operation} on {table} failed: {message}", code=code))


class SupabaseRecordStore:
    """
    RecordStore backed by Supabase/PostgREST.

    The wrapped client must be created with ``get_supabase_client`` so that
    every query runs under the caller's RLS policies.
    """

    def __init__(self, supabase_client: Client):
        self.client = supabase_client

    async def create(self, table: str, record: Record) -> Result[Record]:
        try:
            result = self.client.table(table).insert(record).execute()
        except Exception as e:
            return _store_error("insert", table, e)

        if not result.data or len(result.data) == 0:
            return Err(StoreError(f"insert on {table} returned no data"))

        return Ok(cast(Record, result.data[0]))

    async def get_by_id(self, table: str, record_id: str) -> Result[Optional[Record]]:
        try:
            result = (
                self.client.table(table)
                .select("*")
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            return _store_error("select", table, e)

        if not result.data or len(result.data) == 0:
            return Ok(None)

        return Ok(cast(Record, result.data[0]))

    async def update(self, table: str, record_id: str, changes: Record) -> Result[Record]:
        try:
            result = (
                self.client.table(table)
                .update(changes)
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            return _store_error("update", table, e)

        if not result.data or len(result.data) == 0:
            return Err(NotFoundError(table, record_id))

        return Ok(cast(Record, result.data[0]))

    async def delete(self, table: str, record_id: str) -> Result[bool]:
        try:
            result = (
                self.client.table(table)
                .delete()
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            return _store_error("delete", table, e)

        # PostgREST returns the deleted rows; none means nothing matched
        return Ok(bool(result.data))

    async def find_where(self, table: str, filters: Record) -> Result[List[Record]]:
        query = self.client.table(table).select("*")
        for column, value in filters.items():
            if value is None:
                query = query.is_(column, "null")
            else:
                query = query.eq(column, value)

        try:
            result = query.execute()
        except Exception as e:
            return _store_error("select", table, e)

        return Ok(cast(List[Record], result.data or []))
