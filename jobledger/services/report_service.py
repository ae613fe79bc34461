"""
Read-only financial reports over the user's ledger.

Both organic and derived transactions count towards totals; derived
transactions are the ledger's view of jobs and expenses.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from jobledger.db.store import RecordStore
from jobledger.services.expense_service import get_expenses_by_job
from jobledger.services.job_service import get_job_by_id
from jobledger.utils.constants import TRANSACTIONS_TABLE

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


async def get_financial_summary(
    store: RecordStore,
    user_id: str,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Total income, total expenses, balance and transaction count.

    Args:
        from_date / to_date: Optional inclusive ISO-8601 bounds on transaction date

    Returns:
        Dict with total_income, total_expenses, balance (floats) and transaction_count
    """
    transactions = (
        await store.find_where(TRANSACTIONS_TABLE, {"user_id": user_id})
    ).unwrap()

    total_income = Decimal("0")
    total_expenses = Decimal("0")
    count = 0
    for transaction in transactions:
        date = str(transaction.get("date") or "")
        if from_date and date < from_date:
            continue
        if to_date and date > to_date:
            continue

        count += 1
        if transaction.get("type") == "income":
            total_income += _to_decimal(transaction.get("amount"))
        else:
            total_expenses += _to_decimal(transaction.get("amount"))

    logger.info(f"Computed financial summary for user {user_id} over {count} transactions")

    return {
        "total_income": float(total_income),
        "total_expenses": float(total_expenses),
        "balance": float(total_income - total_expenses),
        "transaction_count": count,
        "from_date": from_date,
        "to_date": to_date,
    }


async def get_job_profit(
    store: RecordStore,
    user_id: str,
    job_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Job amount minus the sum of its expenses.

    Returns:
        Dict with job_id, revenue, expenses, profit and expense_count, or
        None if the job is not found
    """
    job = await get_job_by_id(store, user_id, job_id)
    if not job:
        return None

    expenses = await get_expenses_by_job(store, user_id, job_id)
    revenue = _to_decimal(job.get("amount"))
    spent = sum((_to_decimal(expense.get("amount")) for expense in expenses), Decimal("0"))

    return {
        "job_id": job_id,
        "status": job.get("status"),
        "revenue": float(revenue),
        "expenses": float(spent),
        "profit": float(revenue - spent),
        "expense_count": len(expenses),
    }
