"""
Transaction persistence service.

RULES:
1. All operations MUST respect RLS (user_id = auth.uid())
2. Never trust client-provided user_id - always use authenticated user_id from JWT
3. Transactions created here are organic: no job_id, no expense_id,
   is_derived = false. Derived transactions are written only by sync_service
4. Direct update/delete goes through the completed-job guard first; the
   guard fails closed when it cannot read the linked job
"""

import logging
from typing import Any, Dict, List, Optional

from jobledger.db.store import RecordStore
from jobledger.services.sync_service import DerivedTransactionSynchronizer, build_synchronizer
from jobledger.utils.constants import TRANSACTION_TYPES, TRANSACTIONS_TABLE
from jobledger.utils.errors import NotFoundError, ValidationError
from jobledger.utils.result import Err

logger = logging.getLogger(__name__)


def _validate_type(transaction_type: str) -> None:
    if transaction_type not in TRANSACTION_TYPES:
        raise ValidationError(
            f"Invalid type: {transaction_type}. Must be 'income' or 'expense'"
        )


async def create_transaction(
    store: RecordStore,
    user_id: str,
    category_id: str,
    transaction_type: str,
    amount: float,
    date: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create an organic transaction record.

    Args:
        store: Request-scoped record store
        user_id: The authenticated user's ID (from JWT token)
        category_id: UUID of the spending/earning category
        transaction_type: Money direction ('income' or 'expense')
        amount: Transaction amount (must be >= 0)
        date: ISO-8601 date when the transaction occurred
        description: Optional human-readable description

    Returns:
        The created transaction record (includes id, created_at, etc.)

    Raises:
        ValidationError: If type or amount is invalid
        StoreError: If the database operation fails
    """
    if not user_id:
        raise ValidationError("user_id is required")
    _validate_type(transaction_type)
    if amount < 0:
        raise ValidationError("amount must be >= 0")

    transaction_data = {
        "user_id": user_id,
        "type": transaction_type,
        "category_id": category_id,
        "amount": amount,
        "date": date,
        "description": description,
        "job_id": None,
        "expense_id": None,
        "is_derived": False,
    }

    logger.info(f"Creating transaction for user {user_id}: type={transaction_type}")

    created_transaction = (await store.create(TRANSACTIONS_TABLE, transaction_data)).unwrap()

    logger.info(
        f"Transaction created successfully: id={created_transaction.get('id')}, "
        f"user_id={user_id}"
    )

    return created_transaction


async def get_user_transactions(
    store: RecordStore,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
    category_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    is_derived: Optional[bool] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> List[Dict[str, Any]]:
    """
    Fetch transactions for the user with optional filters, sorting and paging.

    Equality filters go to the store; date range, ordering and pagination
    are applied to the fetched rows.
    """
    filters: Dict[str, Any] = {"user_id": user_id}
    if category_id:
        filters["category_id"] = category_id
    if transaction_type:
        _validate_type(transaction_type)
        filters["type"] = transaction_type
    if is_derived is not None:
        filters["is_derived"] = is_derived

    transactions = (await store.find_where(TRANSACTIONS_TABLE, filters)).unwrap()

    if from_date:
        transactions = [t for t in transactions if str(t.get("date") or "") >= from_date]
    if to_date:
        transactions = [t for t in transactions if str(t.get("date") or "") <= to_date]

    if sort_by not in ("date", "amount"):
        logger.warning(f"Invalid sort_by '{sort_by}', defaulting to 'date'")
        sort_by = "date"
    if sort_order not in ("asc", "desc"):
        logger.warning(f"Invalid sort_order '{sort_order}', defaulting to 'desc'")
        sort_order = "desc"

    if sort_by == "amount":
        transactions.sort(key=lambda t: float(t.get("amount") or 0), reverse=sort_order == "desc")
    else:
        transactions.sort(key=lambda t: str(t.get("date") or ""), reverse=sort_order == "desc")

    page = transactions[offset:offset + limit]

    logger.info(f"Fetched {len(page)} transactions for user {user_id}")

    return page


async def get_transaction_by_id(
    store: RecordStore,
    user_id: str,
    transaction_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single transaction by its ID.

    Returns:
        Transaction record if found and owned by the user, None otherwise
    """
    transaction = (await store.get_by_id(TRANSACTIONS_TABLE, transaction_id)).unwrap()

    if not transaction or transaction.get("user_id") != user_id:
        logger.warning(
            f"Transaction {transaction_id} not found or not accessible by user {user_id}"
        )
        return None

    return transaction


async def update_transaction(
    store: RecordStore,
    user_id: str,
    transaction_id: str,
    category_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    amount: Optional[float] = None,
    date: Optional[str] = None,
    description: Optional[str] = None,
    guard: Optional[DerivedTransactionSynchronizer] = None,
) -> Optional[Dict[str, Any]]:
    """
    Update a transaction through the ordinary transaction screen.

    Returns:
        The updated transaction, or None if not found

    Raises:
        ForbiddenError: If the transaction belongs to a completed job
        StoreError: If the guard or the update cannot complete
        ValidationError: If type or amount is invalid
    """
    guard = guard or build_synchronizer(store)
    checked = await guard.attempt_mutate_transaction(user_id, transaction_id, "update")
    if isinstance(checked, Err) and isinstance(checked.error, NotFoundError):
        return None
    existing = checked.unwrap()

    update_data: Dict[str, Any] = {}
    if category_id is not None:
        update_data["category_id"] = category_id
    if transaction_type is not None:
        _validate_type(transaction_type)
        update_data["type"] = transaction_type
    if amount is not None:
        if amount < 0:
            raise ValidationError("amount must be >= 0")
        update_data["amount"] = amount
    if date is not None:
        update_data["date"] = date
    if description is not None:
        update_data["description"] = description

    if not update_data:
        logger.warning(f"No fields to update for transaction {transaction_id}")
        return existing

    logger.info(
        f"Updating transaction {transaction_id} for user {user_id}: "
        f"fields={list(update_data.keys())}"
    )

    updated_transaction = (
        await store.update(TRANSACTIONS_TABLE, transaction_id, update_data)
    ).unwrap()

    logger.info(f"Transaction {transaction_id} updated successfully for user {user_id}")

    return updated_transaction


async def delete_transaction(
    store: RecordStore,
    user_id: str,
    transaction_id: str,
    guard: Optional[DerivedTransactionSynchronizer] = None,
) -> bool:
    """
    Delete a transaction through the ordinary transaction screen.

    Returns:
        True if deleted, False if not found or not accessible

    Raises:
        ForbiddenError: If the transaction belongs to a completed job
        StoreError: If the guard or the delete cannot complete
    """
    guard = guard or build_synchronizer(store)
    checked = await guard.attempt_mutate_transaction(user_id, transaction_id, "delete")
    if isinstance(checked, Err) and isinstance(checked.error, NotFoundError):
        return False
    checked.unwrap()

    logger.info(f"Deleting transaction {transaction_id} for user {user_id}")

    deleted = (await store.delete(TRANSACTIONS_TABLE, transaction_id)).unwrap()

    if not deleted:
        logger.warning(
            f"Deletion of transaction {transaction_id} returned no rows for user {user_id}"
        )
        return False

    logger.info(f"Transaction {transaction_id} deleted successfully for user {user_id}")

    return True
