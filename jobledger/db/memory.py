"""
In-process RecordStore for local development (STORE_BACKEND=memory) and tests.

Every operation yields to the event loop once before touching data, so
concurrent callers interleave the same way they would against a remote
store. Optional unique constraints reproduce Postgres' unique_violation.
"""

import asyncio
import copy
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from jobledger.db.store import Record
from jobledger.utils.constants import UNIQUE_VIOLATION
from jobledger.utils.errors import NotFoundError, StoreError
from jobledger.utils.result import Err, Ok, Result


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryRecordStore:
    """Dictionary-backed RecordStore. Returns copies so callers cannot mutate rows."""

    def __init__(self, unique_constraints: Optional[Dict[str, Sequence[str]]] = None):
        self.tables: Dict[str, Dict[str, Record]] = {}
        self.unique_constraints = dict(unique_constraints or {})

    def _table(self, table: str) -> Dict[str, Record]:
        return self.tables.setdefault(table, {})

    def _violates_unique(self, table: str, candidate: Record, ignore_id: Optional[str] = None) -> bool:
        columns = self.unique_constraints.get(table)
        if not columns:
            return False
        key = tuple(candidate.get(column) for column in columns)
        for row_id, row in self._table(table).items():
            if row_id == ignore_id:
                continue
            if tuple(row.get(column) for column in columns) == key:
                return True
        return False

    async def create(self, table: str, record: Record) -> Result[Record]:
        await asyncio.sleep(0)
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", _now())
        row.setdefault("updated_at", None)

        if row["id"] in self._table(table):
            return Err(StoreError(f"duplicate id {row['id']} in {table}", code=UNIQUE_VIOLATION))
        if self._violates_unique(table, row):
            return Err(StoreError(f"unique constraint violated on {table}", code=UNIQUE_VIOLATION))

        self._table(table)[row["id"]] = row
        return Ok(copy.deepcopy(row))

    async def get_by_id(self, table: str, record_id: str) -> Result[Optional[Record]]:
        await asyncio.sleep(0)
        row = self._table(table).get(record_id)
        return Ok(copy.deepcopy(row) if row is not None else None)

    async def update(self, table: str, record_id: str, changes: Record) -> Result[Record]:
        await asyncio.sleep(0)
        existing = self._table(table).get(record_id)
        if existing is None:
            return Err(NotFoundError(table, record_id))

        updated = {**existing, **copy.deepcopy(changes), "id": record_id, "updated_at": _now()}
        if self._violates_unique(table, updated, ignore_id=record_id):
            return Err(StoreError(f"unique constraint violated on {table}", code=UNIQUE_VIOLATION))

        self._table(table)[record_id] = updated
        return Ok(copy.deepcopy(updated))

    async def delete(self, table: str, record_id: str) -> Result[bool]:
        await asyncio.sleep(0)
        return Ok(self._table(table).pop(record_id, None) is not None)

    async def find_where(self, table: str, filters: Record) -> Result[List[Record]]:
        await asyncio.sleep(0)
        rows = [
            copy.deepcopy(row)
            for row in self._table(table).values()
            if all(row.get(column) == value for column, value in filters.items())
        ]
        return Ok(rows)
