"""
Job persistence service.

RULES:
1. Never trust a client-provided user_id; always use the authenticated one
2. A job may be created in any status; status changes are owner-driven
3. JobCreated / JobUpdated are published only after the write succeeded,
   so the derived income transaction follows the job (see sync_service)
4. Deleting a job is a plain delete; it is not synchronized
"""

import logging
from typing import Any, Dict, List, Optional

from jobledger.db.store import RecordStore
from jobledger.services.events import JobCreated, JobUpdated, SyncEventBus, publish_event
from jobledger.utils.constants import JOB_STATUSES, JOB_STATUS_IN_PROGRESS, JOBS_TABLE
from jobledger.utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _validate_status(status: str) -> None:
    if status not in JOB_STATUSES:
        raise ValidationError(
            f"Invalid status: {status}. Must be one of {', '.join(JOB_STATUSES)}"
        )


def _validate_amount(amount: float) -> None:
    if amount < 0:
        raise ValidationError("amount must be >= 0")


async def create_job(
    store: RecordStore,
    user_id: str,
    client_id: str,
    amount: float,
    date: str,
    description: Optional[str] = None,
    status: str = JOB_STATUS_IN_PROGRESS,
    location: Optional[str] = None,
    event_bus: Optional[SyncEventBus] = None,
) -> Dict[str, Any]:
    """
    Create a job record.

    Args:
        store: Request-scoped record store
        user_id: The authenticated user's ID
        client_id: UUID of the client the work is for
        amount: Price of the job (must be >= 0)
        date: ISO-8601 date the job takes place
        description: Free-text description
        status: 'in_progress', 'completed' or 'canceled'
        location: Optional address/location
        event_bus: Bus receiving JobCreated after the insert

    Returns:
        The created job record

    Raises:
        ValidationError: If status or amount is invalid
        StoreError: If the insert fails
    """
    if not user_id:
        raise ValidationError("user_id is required")
    _validate_status(status)
    _validate_amount(amount)

    job_data = {
        "user_id": user_id,
        "client_id": client_id,
        "amount": amount,
        "status": status,
        "date": date,
        "description": description,
        "location": location,
    }

    logger.info(f"Creating job for user {user_id}: client={client_id}, status={status}")

    created_job = (await store.create(JOBS_TABLE, job_data)).unwrap()

    logger.info(f"Job created successfully: id={created_job.get('id')}, user_id={user_id}")

    await publish_event(event_bus, JobCreated(user_id=user_id, job=created_job))

    return created_job


async def get_user_jobs(
    store: RecordStore,
    user_id: str,
    status: Optional[str] = None,
    client_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch the user's jobs, newest first, optionally filtered by status or client.
    """
    filters: Dict[str, Any] = {"user_id": user_id}
    if status:
        _validate_status(status)
        filters["status"] = status
    if client_id:
        filters["client_id"] = client_id

    jobs = (await store.find_where(JOBS_TABLE, filters)).unwrap()
    jobs.sort(key=lambda job: str(job.get("date") or ""), reverse=True)

    logger.info(f"Fetched {len(jobs)} jobs for user {user_id}")

    return jobs


async def get_job_by_id(
    store: RecordStore,
    user_id: str,
    job_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single job by its ID.

    Returns:
        Job record if found and owned by the user, None otherwise
    """
    job = (await store.get_by_id(JOBS_TABLE, job_id)).unwrap()

    if not job or job.get("user_id") != user_id:
        logger.warning(f"Job {job_id} not found or not accessible by user {user_id}")
        return None

    return job


async def update_job(
    store: RecordStore,
    user_id: str,
    job_id: str,
    client_id: Optional[str] = None,
    amount: Optional[float] = None,
    status: Optional[str] = None,
    date: Optional[str] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
    event_bus: Optional[SyncEventBus] = None,
) -> Optional[Dict[str, Any]]:
    """
    Update a job. Only provided fields change.

    A status change into or out of 'completed', or an edit of
    amount/date/description while completed, reaches the derived income
    transaction through the JobUpdated event.

    Returns:
        The updated job record, or None if not found
    """
    existing = await get_job_by_id(store, user_id, job_id)
    if not existing:
        return None

    update_data: Dict[str, Any] = {}
    if client_id is not None:
        update_data["client_id"] = client_id
    if amount is not None:
        _validate_amount(amount)
        update_data["amount"] = amount
    if status is not None:
        _validate_status(status)
        update_data["status"] = status
    if date is not None:
        update_data["date"] = date
    if description is not None:
        update_data["description"] = description
    if location is not None:
        update_data["location"] = location

    if not update_data:
        logger.warning(f"No fields to update for job {job_id}")
        return existing

    logger.info(f"Updating job {job_id} for user {user_id}: fields={list(update_data.keys())}")

    updated_job = (await store.update(JOBS_TABLE, job_id, update_data)).unwrap()

    if existing.get("status") != updated_job.get("status"):
        logger.info(
            f"Job {job_id} status changed: {existing.get('status')} -> {updated_job.get('status')}"
        )

    await publish_event(
        event_bus, JobUpdated(user_id=user_id, previous=existing, job=updated_job)
    )

    return updated_job


async def delete_job(
    store: RecordStore,
    user_id: str,
    job_id: str,
) -> bool:
    """
    Delete a job.

    Returns:
        True if deleted, False if not found or not accessible
    """
    existing = await get_job_by_id(store, user_id, job_id)
    if not existing:
        return False

    logger.info(f"Deleting job {job_id} for user {user_id}")

    deleted = (await store.delete(JOBS_TABLE, job_id)).unwrap()
    if not deleted:
        logger.warning(f"Deletion of job {job_id} returned no rows for user {user_id}")

    return deleted
