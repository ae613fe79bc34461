"""
Transaction CRUD API endpoints.

Provides endpoints for managing ledger transactions (income/expense).

Organic transactions are entered here by the user. Derived transactions are
maintained by the job/expense synchronizer; those linked to a completed job
cannot be edited or deleted here (403) and must be changed from the job.
"""

import logging
from typing import Annotated, Literal, Optional, cast

from fastapi import APIRouter, Depends, HTTPException, Query, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, not_found, unexpected_error
from jobledger.schemas.transactions import (
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionDeleteResponse,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionUpdateRequest,
    TransactionUpdateResponse,
)
from jobledger.services import (
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_user_transactions,
    update_transaction,
)
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _require_field(data: dict, key: str):
    """Return data[key] or raise ValueError if missing/None."""
    val = data.get(key)
    if val is None:
        raise ValueError(f"Missing required field '{key}' in transaction data")
    return val


def _coerce_type(data: dict, key: str) -> Literal["income", "expense"]:
    val = _require_field(data, key)
    if val not in ("income", "expense"):
        raise ValueError(f"Invalid type: {val}")
    return cast(Literal["income", "expense"], val)


def _coerce_float(data: dict, key: str) -> float:
    val = _require_field(data, key)
    try:
        return float(val)
    except (TypeError, ValueError):
        raise ValueError(f"Field '{key}' is not convertible to float: {val}")


def to_transaction_response(txn: dict) -> TransactionDetailResponse:
    return TransactionDetailResponse(
        id=str(_require_field(txn, "id")),
        user_id=str(_require_field(txn, "user_id")),
        type=_coerce_type(txn, "type"),
        category_id=str(_require_field(txn, "category_id")),
        amount=_coerce_float(txn, "amount"),
        date=str(_require_field(txn, "date")),
        description=txn.get("description"),
        job_id=txn.get("job_id"),
        expense_id=txn.get("expense_id"),
        is_derived=bool(txn.get("is_derived")),
        created_at=txn.get("created_at"),
        updated_at=txn.get("updated_at"),
    )


@router.post(
    "",
    response_model=TransactionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new transaction",
    description="""
    Create an organic transaction manually.

    Use this for:
    - Income that is not a job (e.g. a refund)
    - Running costs that are not tied to a job

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures user can only create transactions for themselves
    """
)
async def create_transaction_record(
    request: TransactionCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionCreateResponse:
    """
    Create a new organic transaction.

    Step 1: Auth via get_authenticated_user
    Step 2: FastAPI validates TransactionCreateRequest
    Step 3: Call create_transaction() with a request-scoped store
    Step 4: Map the created row to TransactionDetailResponse
    """
    logger.info(
        f"Creating transaction for user_id={auth_user.user_id}, "
        f"category={request.category_id}, amount={request.amount}, type={request.type}"
    )

    store = get_record_store(auth_user.access_token)

    try:
        created_transaction = await create_transaction(
            store=store,
            user_id=auth_user.user_id,
            category_id=request.category_id,
            transaction_type=request.type,
            amount=request.amount,
            date=request.date,
            description=request.description,
        )

        transaction_detail = to_transaction_response(created_transaction)

        logger.info(
            f"Transaction created successfully: "
            f"id={transaction_detail.id}, user_id={auth_user.user_id}"
        )

        return TransactionCreateResponse(
            status="CREATED",
            transaction_id=transaction_detail.id,
            transaction=transaction_detail,
            message="Transaction created successfully"
        )

    except LedgerError as e:
        raise ledger_http_exception(e)
    except ValueError as e:
        logger.error(f"Invalid transaction data: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to create transaction: {e}", exc_info=True)
        raise unexpected_error("persistence_error", "Failed to save transaction to database")


@router.get(
    "",
    response_model=TransactionListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user's transactions",
    description="""
    Retrieve the authenticated user's transactions, organic and derived.

    This endpoint:
    - Returns a paginated list ordered by date descending by default
    - Supports filtering by category, type, derived flag and date range
    - Supports sorting by date or amount
    """
)
async def list_transactions(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    limit: int = Query(50, ge=1, le=100, description="Maximum number of transactions to return"),
    offset: int = Query(0, ge=0, description="Number of transactions to skip for pagination"),
    category_id: Optional[str] = Query(None, description="Filter by category UUID"),
    transaction_type: Optional[str] = Query(None, alias="type", description="Filter by type (income/expense)"),
    is_derived: Optional[bool] = Query(None, description="Only derived (true) or only organic (false)"),
    from_date: Optional[str] = Query(None, description="Filter by start date (ISO-8601)"),
    to_date: Optional[str] = Query(None, description="Filter by end date (ISO-8601)"),
    sort_by: str = Query("date", description="Sort field (date|amount)"),
    sort_order: str = Query("desc", description="Sort order (asc|desc)"),
) -> TransactionListResponse:
    """
    List transactions for the authenticated user.

    Args:
        auth_user: Authenticated user from token
        limit: Maximum number of transactions to return (default 50, max 100)
        offset: Number of transactions to skip for pagination (default 0)
        category_id: Optional filter by category
        transaction_type: Optional filter by type
        is_derived: Optional filter on the derived flag
        from_date: Optional filter by start date
        to_date: Optional filter by end date
        sort_by: Field to sort by (date or amount, default date)
        sort_order: Sort order (asc or desc, default desc)

    Returns:
        TransactionListResponse with list of transactions and pagination metadata
    """
    logger.info(
        f"Listing transactions for user {auth_user.user_id} "
        f"(limit={limit}, offset={offset}, sort_by={sort_by}, sort_order={sort_order}, "
        f"filters: category={category_id}, type={transaction_type}, is_derived={is_derived})"
    )

    store = get_record_store(auth_user.access_token)

    try:
        transactions = await get_user_transactions(
            store=store,
            user_id=auth_user.user_id,
            limit=limit,
            offset=offset,
            category_id=category_id,
            transaction_type=transaction_type,
            is_derived=is_derived,
            from_date=from_date,
            to_date=to_date,
            sort_by=sort_by,
            sort_order=sort_order,
        )

        transaction_responses = [to_transaction_response(txn) for txn in transactions]

    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch transactions: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve transactions from database")

    logger.info(f"Returning {len(transaction_responses)} transactions for user {auth_user.user_id}")

    return TransactionListResponse(
        transactions=transaction_responses,
        count=len(transaction_responses),
        limit=limit,
        offset=offset
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get transaction details",
)
async def get_transaction(
    transaction_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionDetailResponse:
    """
    Get details of a single transaction.

    Raises:
        HTTPException 404: If transaction not found or not accessible by user
    """
    logger.info(f"Fetching transaction {transaction_id} for user {auth_user.user_id}")

    store = get_record_store(auth_user.access_token)

    try:
        transaction = await get_transaction_by_id(
            store=store,
            user_id=auth_user.user_id,
            transaction_id=transaction_id
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch transaction {transaction_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve transaction from database")

    if not transaction:
        raise not_found("Transaction", transaction_id)

    return to_transaction_response(transaction)


@router.patch(
    "/{transaction_id}",
    response_model=TransactionUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a transaction",
    description="""
    Update fields of an existing transaction.

    Returns 403 when the transaction is linked to a completed job; such
    transactions change only through the job itself.
    """
)
async def update_transaction_record(
    transaction_id: str,
    request: TransactionUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionUpdateResponse:
    """
    Update an existing transaction.

    Raises:
        HTTPException 400: If no fields are provided or values are invalid
        HTTPException 403: If the transaction belongs to a completed job
        HTTPException 404: If transaction not found or not accessible
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

    logger.info(
        f"Updating transaction {transaction_id} for user {auth_user.user_id}: "
        f"fields={list(updates.keys())}"
    )

    store = get_record_store(auth_user.access_token)

    try:
        updated_transaction = await update_transaction(
            store=store,
            user_id=auth_user.user_id,
            transaction_id=transaction_id,
            category_id=request.category_id,
            transaction_type=request.type,
            amount=request.amount,
            date=request.date,
            description=request.description,
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to update transaction {transaction_id}: {e}", exc_info=True)
        raise unexpected_error("update_error", "Failed to update transaction")

    if not updated_transaction:
        raise not_found("Transaction", transaction_id)

    return TransactionUpdateResponse(
        status="UPDATED",
        transaction_id=transaction_id,
        transaction=to_transaction_response(updated_transaction),
        message="Transaction updated successfully"
    )


@router.delete(
    "/{transaction_id}",
    response_model=TransactionDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a transaction",
    description="""
    Delete a transaction.

    Returns 403 when the transaction is linked to a completed job.
    """
)
async def delete_transaction_record(
    transaction_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionDeleteResponse:
    logger.info(f"Deleting transaction {transaction_id} for user {auth_user.user_id}")

    store = get_record_store(auth_user.access_token)

    try:
        deleted = await delete_transaction(
            store=store,
            user_id=auth_user.user_id,
            transaction_id=transaction_id
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to delete transaction {transaction_id}: {e}", exc_info=True)
        raise unexpected_error("delete_error", "Failed to delete transaction")

    if not deleted:
        raise not_found("Transaction", transaction_id)

    return TransactionDeleteResponse(
        status="DELETED",
        transaction_id=transaction_id,
        message="Transaction deleted successfully"
    )
