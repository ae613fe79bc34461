"""
Job API endpoints.

Jobs are the units of paid work a user does for a client. Every mutation
publishes a post-commit event so the derived income transaction (category
"Services Rendered") follows the job's status and mirrored fields.
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, not_found, unexpected_error
from jobledger.routes.expenses import to_expense_response
from jobledger.schemas.expenses import ExpenseListResponse
from jobledger.schemas.jobs import (
    JobCreateRequest,
    JobCreateResponse,
    JobDeleteResponse,
    JobListResponse,
    JobProfitResponse,
    JobResponse,
    JobUpdateRequest,
    JobUpdateResponse,
)
from jobledger.services import (
    build_sync_event_bus,
    create_job,
    delete_job,
    get_expenses_by_job,
    get_job_by_id,
    get_job_profit,
    get_user_jobs,
    update_job,
)
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def to_job_response(job: Dict[str, Any]) -> JobResponse:
    return JobResponse(
        id=str(job.get("id")),
        user_id=str(job.get("user_id")),
        client_id=str(job.get("client_id")),
        amount=float(job.get("amount") or 0),
        status=job.get("status"),
        date=str(job.get("date")),
        description=job.get("description"),
        location=job.get("location"),
        created_at=job.get("created_at"),
        updated_at=job.get("updated_at"),
    )


@router.post(
    "",
    response_model=JobCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job",
    description="""
    Create a job for one of the user's clients.

    A job created directly in 'completed' status immediately gets its
    derived income transaction.

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures user can only create jobs for themselves
    """
)
async def create_job_record(
    request: JobCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> JobCreateResponse:
    logger.info(
        f"Creating job for user_id={auth_user.user_id}, client={request.client_id}, "
        f"status={request.status}"
    )

    store = get_record_store(auth_user.access_token)

    try:
        created_job = await create_job(
            store=store,
            user_id=auth_user.user_id,
            client_id=request.client_id,
            amount=request.amount,
            date=request.date,
            description=request.description,
            status=request.status,
            location=request.location,
            event_bus=build_sync_event_bus(store),
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create job: {e}", exc_info=True)
        raise unexpected_error("persistence_error", "Failed to save job to database")

    return JobCreateResponse(
        status="CREATED",
        job_id=str(created_job.get("id")),
        job=to_job_response(created_job),
        message="Job created successfully"
    )


@router.get(
    "",
    response_model=JobListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user's jobs",
)
async def list_jobs(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    job_status: Optional[str] = Query(
        None, alias="status", description="Filter by status (in_progress|completed|canceled)"
    ),
    client_id: Optional[str] = Query(None, description="Filter by client UUID"),
) -> JobListResponse:
    """
    List the authenticated user's jobs, newest first.
    """
    logger.info(f"Listing jobs for user {auth_user.user_id} (status={job_status}, client={client_id})")

    store = get_record_store(auth_user.access_token)

    try:
        jobs = await get_user_jobs(store, auth_user.user_id, status=job_status, client_id=client_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch jobs: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve jobs from database")

    job_responses = [to_job_response(job) for job in jobs]
    return JobListResponse(jobs=job_responses, count=len(job_responses))


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    status_code=status.HTTP_200_OK,
    summary="Get job details",
)
async def get_job(
    job_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> JobResponse:
    store = get_record_store(auth_user.access_token)

    try:
        job = await get_job_by_id(store, auth_user.user_id, job_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch job {job_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve job from database")

    if not job:
        raise not_found("Job", job_id)

    return to_job_response(job)


@router.patch(
    "/{job_id}",
    response_model=JobUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a job",
    description="""
    Partially update a job.

    Side effects on the ledger:
    - status -> 'completed': an income transaction is booked
    - status 'completed' -> anything else: that transaction is removed
    - amount/date/description edits on a completed job are mirrored
    """
)
async def update_job_record(
    job_id: str,
    request: JobUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> JobUpdateResponse:
    """
    Update a job and let the synchronizer reconcile its derived transaction.

    Raises:
        HTTPException 400: If no fields are provided or values are invalid
        HTTPException 404: If the job is not found
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

    logger.info(f"Updating job {job_id} for user {auth_user.user_id}: fields={list(updates.keys())}")

    store = get_record_store(auth_user.access_token)

    try:
        updated_job = await update_job(
            store=store,
            user_id=auth_user.user_id,
            job_id=job_id,
            event_bus=build_sync_event_bus(store),
            **updates,
        )
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to update job {job_id}: {e}", exc_info=True)
        raise unexpected_error("update_error", "Failed to update job")

    if not updated_job:
        raise not_found("Job", job_id)

    return JobUpdateResponse(
        status="UPDATED",
        job_id=job_id,
        job=to_job_response(updated_job),
        message="Job updated successfully"
    )


@router.delete(
    "/{job_id}",
    response_model=JobDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a job",
)
async def delete_job_record(
    job_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> JobDeleteResponse:
    store = get_record_store(auth_user.access_token)

    try:
        deleted = await delete_job(store, auth_user.user_id, job_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to delete job {job_id}: {e}", exc_info=True)
        raise unexpected_error("delete_error", "Failed to delete job")

    if not deleted:
        raise not_found("Job", job_id)

    return JobDeleteResponse(
        status="DELETED",
        job_id=job_id,
        message="Job deleted successfully"
    )


@router.get(
    "/{job_id}/expenses",
    response_model=ExpenseListResponse,
    status_code=status.HTTP_200_OK,
    summary="List a job's expenses",
)
async def list_job_expenses(
    job_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ExpenseListResponse:
    store = get_record_store(auth_user.access_token)

    try:
        job = await get_job_by_id(store, auth_user.user_id, job_id)
        if not job:
            raise not_found("Job", job_id)
        expenses = await get_expenses_by_job(store, auth_user.user_id, job_id)
    except HTTPException:
        raise
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch expenses for job {job_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve expenses from database")

    expense_responses = [to_expense_response(expense) for expense in expenses]
    return ExpenseListResponse(expenses=expense_responses, count=len(expense_responses))


@router.get(
    "/{job_id}/profit",
    response_model=JobProfitResponse,
    status_code=status.HTTP_200_OK,
    summary="Job profit",
    description="Job amount minus the sum of the expenses recorded against it.",
)
async def get_job_profit_report(
    job_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> JobProfitResponse:
    store = get_record_store(auth_user.access_token)

    try:
        profit = await get_job_profit(store, auth_user.user_id, job_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to compute profit for job {job_id}: {e}", exc_info=True)
        raise unexpected_error("report_error", "Failed to compute job profit")

    if not profit:
        raise not_found("Job", job_id)

    return JobProfitResponse(**profit)
