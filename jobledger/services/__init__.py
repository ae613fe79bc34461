"""
Service layer for the Job Ledger backend.

Contains business logic that:
- Validates domain rules before touching the record store
- Persists jobs, expenses, transactions, categories and clients through a
  request-scoped RecordStore (RLS enforced on Supabase)
- Publishes post-commit events that keep derived transactions in sync

Services act as the glue between routes (HTTP layer) and the store.
"""

from .category_resolver import CategoryResolver
from .category_service import (
    create_category,
    delete_category,
    get_all_categories,
    get_category_by_id,
)
from .client_service import (
    create_client,
    delete_client,
    get_client_by_id,
    get_user_clients,
    update_client,
)
from .events import SyncEventBus
from .expense_service import (
    create_expense,
    delete_expense,
    get_expense_by_id,
    get_expenses_by_job,
    update_expense,
)
from .job_service import (
    create_job,
    delete_job,
    get_job_by_id,
    get_user_jobs,
    update_job,
)
from .report_service import get_financial_summary, get_job_profit
from .sync_service import (
    DerivedTransactionSynchronizer,
    SyncOutcome,
    build_sync_event_bus,
    build_synchronizer,
)
from .transaction_service import (
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_user_transactions,
    update_transaction,
)

__all__ = [
    "CategoryResolver",
    "DerivedTransactionSynchronizer",
    "SyncOutcome",
    "SyncEventBus",
    "build_synchronizer",
    "build_sync_event_bus",
    "get_all_categories",
    "get_category_by_id",
    "create_category",
    "delete_category",
    "create_client",
    "get_user_clients",
    "get_client_by_id",
    "update_client",
    "delete_client",
    "create_expense",
    "get_expenses_by_job",
    "get_expense_by_id",
    "update_expense",
    "delete_expense",
    "create_job",
    "get_user_jobs",
    "get_job_by_id",
    "update_job",
    "delete_job",
    "get_financial_summary",
    "get_job_profit",
    "create_transaction",
    "get_user_transactions",
    "get_transaction_by_id",
    "update_transaction",
    "delete_transaction",
]
