"""
Database access layer for the Job Ledger backend.

All database operations MUST:
- Respect Row Level Security (RLS): user_id = auth.uid()
- Never bypass RLS (no service_role client for user requests)
- Go through a RecordStore so results are tagged Ok/Err

Includes:
- Supabase client initialization (client.py)
- The RecordStore protocol and its Supabase implementation (store.py)
- An in-process store for local development and tests (memory.py)
"""

from jobledger.config import settings

from .client import get_supabase_client
from .memory import InMemoryRecordStore
from .store import RecordStore, SupabaseRecordStore

_memory_store: InMemoryRecordStore | None = None


def get_record_store(access_token: str) -> RecordStore:
    """
    Build the per-request RecordStore for an authenticated user.

    With STORE_BACKEND=memory every request shares one process-local store,
    which is only meant for running the API without a Supabase project.
    """
    global _memory_store

    if settings.STORE_BACKEND == "memory":
        if _memory_store is None:
            _memory_store = InMemoryRecordStore()
        return _memory_store

    return SupabaseRecordStore(get_supabase_client(access_token))


__all__ = [
    "get_supabase_client",
    "get_record_store",
    "RecordStore",
    "SupabaseRecordStore",
    "InMemoryRecordStore",
]
