"""
Expense persistence service.

Expenses are additional costs tied to a job (supplies, transport, ...).

RULES:
1. An expense always belongs to one of the user's jobs
2. Every create/update/delete publishes an event after the write succeeds;
   the synchronizer keeps exactly one derived expense transaction per expense
3. A failure to maintain that transaction never fails the expense write
"""

import logging
from typing import Any, Dict, List, Optional

from jobledger.db.store import RecordStore
from jobledger.services.events import (
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseUpdated,
    SyncEventBus,
    publish_event,
)
from jobledger.services.job_service import get_job_by_id
from jobledger.utils.constants import EXPENSES_TABLE, JOBS_TABLE
from jobledger.utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def create_expense(
    store: RecordStore,
    user_id: str,
    job_id: str,
    amount: float,
    date: str,
    description: str,
    category_id: Optional[str] = None,
    event_bus: Optional[SyncEventBus] = None,
) -> Dict[str, Any]:
    """
    Create an expense for one of the user's jobs.

    Raises:
        ValidationError: If amount is negative or user_id missing
        NotFoundError: If the job does not exist or belongs to another user
        StoreError: If the insert fails
    """
    if not user_id:
        raise ValidationError("user_id is required")
    if amount < 0:
        raise ValidationError("amount must be >= 0")

    job = await get_job_by_id(store, user_id, job_id)
    if not job:
        raise NotFoundError(JOBS_TABLE, job_id)

    expense_data = {
        "job_id": job_id,
        "user_id": user_id,
        "category_id": category_id,
        "amount": amount,
        "date": date,
        "description": description,
    }

    logger.info(f"Creating expense for user {user_id}: job={job_id}")

    created_expense = (await store.create(EXPENSES_TABLE, expense_data)).unwrap()

    logger.info(f"Expense created successfully: id={created_expense.get('id')}, job={job_id}")

    await publish_event(event_bus, ExpenseCreated(user_id=user_id, expense=created_expense))

    return created_expense


async def get_expenses_by_job(
    store: RecordStore,
    user_id: str,
    job_id: str,
) -> List[Dict[str, Any]]:
    """Fetch all expenses recorded against a job, oldest first."""
    expenses = (
        await store.find_where(EXPENSES_TABLE, {"user_id": user_id, "job_id": job_id})
    ).unwrap()
    expenses.sort(key=lambda expense: str(expense.get("date") or ""))

    logger.info(f"Fetched {len(expenses)} expenses for job {job_id}")

    return expenses


async def get_expense_by_id(
    store: RecordStore,
    user_id: str,
    expense_id: str,
) -> Optional[Dict[str, Any]]:
    """Fetch one expense; None if absent or owned by someone else."""
    expense = (await store.get_by_id(EXPENSES_TABLE, expense_id)).unwrap()

    if not expense or expense.get("user_id") != user_id:
        logger.warning(f"Expense {expense_id} not found or not accessible by user {user_id}")
        return None

    return expense


async def update_expense(
    store: RecordStore,
    user_id: str,
    expense_id: str,
    amount: Optional[float] = None,
    date: Optional[str] = None,
    description: Optional[str] = None,
    category_id: Optional[str] = None,
    event_bus: Optional[SyncEventBus] = None,
) -> Optional[Dict[str, Any]]:
    """
    Update an expense and mirror it onto its derived transaction.

    Returns:
        The updated expense, or None if not found
    """
    existing = await get_expense_by_id(store, user_id, expense_id)
    if not existing:
        return None

    update_data: Dict[str, Any] = {}
    if amount is not None:
        if amount < 0:
            raise ValidationError("amount must be >= 0")
        update_data["amount"] = amount
    if date is not None:
        update_data["date"] = date
    if description is not None:
        update_data["description"] = description
    if category_id is not None:
        update_data["category_id"] = category_id

    if not update_data:
        logger.warning(f"No fields to update for expense {expense_id}")
        return existing

    logger.info(f"Updating expense {expense_id} for user {user_id}: fields={list(update_data.keys())}")

    updated_expense = (await store.update(EXPENSES_TABLE, expense_id, update_data)).unwrap()

    await publish_event(event_bus, ExpenseUpdated(user_id=user_id, expense=updated_expense))

    return updated_expense


async def delete_expense(
    store: RecordStore,
    user_id: str,
    expense_id: str,
    event_bus: Optional[SyncEventBus] = None,
) -> bool:
    """
    Delete an expense; its derived transaction is removed afterwards.

    Returns:
        True if deleted, False if not found or not accessible
    """
    existing = await get_expense_by_id(store, user_id, expense_id)
    if not existing:
        return False

    logger.info(f"Deleting expense {expense_id} for user {user_id}")

    deleted = (await store.delete(EXPENSES_TABLE, expense_id)).unwrap()
    if not deleted:
        logger.warning(f"Deletion of expense {expense_id} returned no rows for user {user_id}")
        return False

    await publish_event(event_bus, ExpenseDeleted(user_id=user_id, expense=existing))

    return True
