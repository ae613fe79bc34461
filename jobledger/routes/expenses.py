"""
Expense API endpoints.

Expenses are costs recorded against a job. Each create/update/delete is
mirrored onto an expense transaction in the "Additional Expenses" category
after the write commits.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, not_found, unexpected_error
from jobledger.schemas.expenses import (
    ExpenseCreateRequest,
    ExpenseCreateResponse,
    ExpenseDeleteResponse,
    ExpenseResponse,
    ExpenseUpdateRequest,
    ExpenseUpdateResponse,
)
from jobledger.services import (
    build_sync_event_bus,
    create_expense,
    delete_expense,
    get_expense_by_id,
    update_expense,
)
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def to_expense_response(expense: Dict[str, Any]) -> ExpenseResponse:
    return ExpenseResponse(
        id=str(expense.get("id")),
        job_id=str(expense.get("job_id")),
        user_id=str(expense.get("user_id")),
        category_id=expense.get("category_id"),
        amount=float(expense.get("amount") or 0),
        date=str(expense.get("date")),
        description=str(expense.get("description") or ""),
        created_at=expense.get("created_at"),
        updated_at=expense.get("updated_at"),
    )


@router.post(
    "",
    response_model=ExpenseCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an expense on a job",
    description="""
    Record a cost against one of the user's jobs.

    An expense transaction ("Additional expense: <description>") is created
    automatically in the "Additional Expenses" category.
    """
)
async def create_expense_record(
    request: ExpenseCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ExpenseCreateResponse:
    logger.info(f"Creating expense for user_id={auth_user.user_id}, job={request.job_id}")

    store = get_record_store(auth_user.access_token)

    try:
        created_expense = await create_expense(
            store=store,
            user_id=auth_user.user_id,
            job_id=request.job_id,
            amount=request.amount,
            date=request.date,
            description=request.description,
            category_id=request.category_id,
            event_bus=build_sync_event_bus(store),
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create expense: {e}", exc_info=True)
        raise unexpected_error("persistence_error", "Failed to save expense to database")

    return ExpenseCreateResponse(
        status="CREATED",
        expense_id=str(created_expense.get("id")),
        expense=to_expense_response(created_expense),
        message="Expense created successfully"
    )


@router.get(
    "/{expense_id}",
    response_model=ExpenseResponse,
    status_code=status.HTTP_200_OK,
    summary="Get expense details",
)
async def get_expense(
    expense_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ExpenseResponse:
    store = get_record_store(auth_user.access_token)

    try:
        expense = await get_expense_by_id(store, auth_user.user_id, expense_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch expense {expense_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve expense from database")

    if not expense:
        raise not_found("Expense", expense_id)

    return to_expense_response(expense)


@router.patch(
    "/{expense_id}",
    response_model=ExpenseUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update an expense",
)
async def update_expense_record(
    expense_id: str,
    request: ExpenseUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ExpenseUpdateResponse:
    """
    Update an expense; amount, date and description are mirrored onto its
    derived transaction.
    """
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    store = get_record_store(auth_user.access_token)

    try:
        updated_expense = await update_expense(
            store=store,
            user_id=auth_user.user_id,
            expense_id=expense_id,
            event_bus=build_sync_event_bus(store),
            **updates,
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to update expense {expense_id}: {e}", exc_info=True)
        raise unexpected_error("update_error", "Failed to update expense")

    if not updated_expense:
        raise not_found("Expense", expense_id)

    return ExpenseUpdateResponse(
        status="UPDATED",
        expense_id=expense_id,
        expense=to_expense_response(updated_expense),
        message="Expense updated successfully"
    )


@router.delete(
    "/{expense_id}",
    response_model=ExpenseDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete an expense",
)
async def delete_expense_record(
    expense_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ExpenseDeleteResponse:
    store = get_record_store(auth_user.access_token)

    try:
        deleted = await delete_expense(
            store, auth_user.user_id, expense_id, event_bus=build_sync_event_bus(store)
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to delete expense {expense_id}: {e}", exc_info=True)
        raise unexpected_error("delete_error", "Failed to delete expense")

    if not deleted:
        raise not_found("Expense", expense_id)

    return ExpenseDeleteResponse(
        status="DELETED",
        expense_id=expense_id,
        message="Expense deleted successfully"
    )
