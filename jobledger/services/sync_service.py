"""
Derived-transaction synchronization.

RULES:
1. A completed job has exactly one income transaction (job_id = job.id).
   Entering "completed" creates it, leaving "completed" deletes it, and
   amount/date/description edits on a completed job are mirrored onto it.
2. Every expense has exactly one expense transaction (expense_id =
   expense.id), created, mirrored and deleted along with the expense.
3. Derived transactions carry is_derived = true. Organic transactions (no
   job_id, no expense_id) are never touched here.
4. Synchronization never fails the primary mutation: every propagation
   returns a Result and logs failures instead of raising.
5. Transactions whose job is completed may only change through the job
   (attempt_mutate_transaction). Expense-derived transactions are not
   guarded.
6. All lookups are scoped to the owner of the triggering record.

Store calls within one propagation are awaited one after another; the
category is resolved before the transaction is written.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from jobledger.config import settings
from jobledger.db.store import Record, RecordStore
from jobledger.services.category_resolver import CategoryResolver
from jobledger.services.events import (
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseUpdated,
    JobCreated,
    JobUpdated,
    SyncEventBus,
)
from jobledger.utils.constants import (
    JOB_STATUS_COMPLETED,
    JOBS_TABLE,
    MIRRORED_FIELDS,
    TRANSACTIONS_TABLE,
)
from jobledger.utils.errors import (
    ForbiddenError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from jobledger.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

JOB_DESCRIPTION_PREFIX = "Service rendered — "
EXPENSE_DESCRIPTION_PREFIX = "Additional expense: "

GUARDED_OPERATIONS = ("update", "delete")


@dataclass(frozen=True)
class SyncOutcome:
    """What a propagation did to the shadow transaction."""

    action: str  # "created" | "updated" | "deleted" | "noop"
    transaction_id: Optional[str] = None


NOOP = SyncOutcome(action="noop")


def _job_description(job: Record) -> str:
    return f"{JOB_DESCRIPTION_PREFIX}{job.get('description') or ''}"


def _expense_description(expense: Record) -> str:
    return f"{EXPENSE_DESCRIPTION_PREFIX}{expense.get('description') or ''}"


def _same_value(field: str, before: Any, after: Any) -> bool:
    if field == "amount" and before is not None and after is not None:
        try:
            return float(before) == float(after)
        except (TypeError, ValueError):
            return before == after
    return before == after


def _mirrored_fields_changed(previous: Record, current: Record) -> bool:
    return any(
        not _same_value(field, previous.get(field), current.get(field))
        for field in MIRRORED_FIELDS
    )


def _require_identity(record: Record, kind: str) -> Optional[Err]:
    if not record.get("user_id"):
        return Err(ValidationError(f"{kind} is missing its owner (user_id)"))
    if not record.get("id"):
        return Err(ValidationError(f"{kind} is missing its id"))
    return None


class DerivedTransactionSynchronizer:
    """
    Keeps shadow transactions in step with jobs and expenses.

    Collaborators are injected: ``store`` for every read/write and
    ``resolver`` for the well-known categories.
    """

    def __init__(
        self,
        store: RecordStore,
        resolver: CategoryResolver,
        income_category: Optional[str] = None,
        expense_category: Optional[str] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.income_category = income_category or settings.SERVICES_RENDERED_CATEGORY
        self.expense_category = expense_category or settings.ADDITIONAL_EXPENSES_CATEGORY

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _find_derived(
        self, user_id: str, reference_column: str, reference_id: str
    ) -> Result[Optional[Record]]:
        result = await self.store.find_where(
            TRANSACTIONS_TABLE, {"user_id": user_id, reference_column: reference_id}
        )
        if isinstance(result, Err):
            return result

        matches = result.value
        if len(matches) > 1:
            logger.warning(
                f"{len(matches)} transactions reference {reference_column}={reference_id}; "
                f"using {matches[0].get('id')}"
            )
        return Ok(matches[0] if matches else None)

    # ------------------------------------------------------------------
    # Shared propagation steps
    # ------------------------------------------------------------------

    async def _create_derived(
        self,
        owner: str,
        category_name: str,
        kind: str,
        fields: Record,
        reference_column: str,
        reference_id: str,
    ) -> Result[SyncOutcome]:
        category = await self.resolver.resolve(owner, category_name, kind)
        if isinstance(category, Err):
            logger.warning(
                f"Skipping derived {kind} transaction for {reference_column}={reference_id}: "
                f"category '{category_name}' unavailable ({category.error.message})"
            )
            return category

        record = {
            "user_id": owner,
            "type": kind,
            "category_id": category.value,
            "amount": fields.get("amount"),
            "date": fields.get("date"),
            "description": fields.get("description"),
            "job_id": None,
            "expense_id": None,
            "is_derived": True,
        }
        record[reference_column] = reference_id

        created = await self.store.create(TRANSACTIONS_TABLE, record)
        if isinstance(created, Err):
            return created

        transaction_id = str(created.value.get("id"))
        logger.info(
            f"Derived {kind} transaction {transaction_id} created for "
            f"{reference_column}={reference_id}"
        )
        return Ok(SyncOutcome(action="created", transaction_id=transaction_id))

    async def _mirror_derived(
        self, owner: str, reference_column: str, reference_id: str, changes: Record
    ) -> Result[SyncOutcome]:
        found = await self._find_derived(owner, reference_column, reference_id)
        if isinstance(found, Err):
            return found
        if found.value is None:
            logger.debug(f"No derived transaction for {reference_column}={reference_id}, nothing to update")
            return Ok(NOOP)

        transaction_id = str(found.value["id"])
        updated = await self.store.update(TRANSACTIONS_TABLE, transaction_id, changes)
        if isinstance(updated, Err):
            if isinstance(updated.error, NotFoundError):
                return Ok(NOOP)
            return updated

        logger.info(f"Derived transaction {transaction_id} updated for {reference_column}={reference_id}")
        return Ok(SyncOutcome(action="updated", transaction_id=transaction_id))

    async def _delete_derived(
        self, owner: str, reference_column: str, reference_id: str
    ) -> Result[SyncOutcome]:
        found = await self._find_derived(owner, reference_column, reference_id)
        if isinstance(found, Err):
            return found
        if found.value is None:
            logger.debug(f"No derived transaction for {reference_column}={reference_id}, nothing to delete")
            return Ok(NOOP)

        transaction_id = str(found.value["id"])
        deleted = await self.store.delete(TRANSACTIONS_TABLE, transaction_id)
        if isinstance(deleted, Err):
            return deleted
        if not deleted.value:
            return Ok(NOOP)

        logger.info(f"Derived transaction {transaction_id} deleted for {reference_column}={reference_id}")
        return Ok(SyncOutcome(action="deleted", transaction_id=transaction_id))

    async def _isolated(self, label: str, propagation) -> Result[SyncOutcome]:
        """Run a propagation so that nothing escapes except a Result."""
        try:
            outcome = await propagation
        except Exception as e:
            logger.error(f"{label} failed unexpectedly: {e}", exc_info=True)
            return Err(LedgerError(f"{label} failed: {e}"))

        if isinstance(outcome, Err):
            logger.error(f"{label} failed: {outcome.error.message}")
        return outcome

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def on_job_status_changed(
        self,
        job: Record,
        previous_status: Optional[str],
        new_status: Optional[str],
        previous_job: Optional[Record] = None,
    ) -> Result[SyncOutcome]:
        """
        Propagate a job write onto its income transaction.

        Args:
            job: The job row after the write.
            previous_status: Status before the write (None for a new job).
            new_status: Status after the write.
            previous_job: Row before the write, used to detect edits of a job
                that stays completed. Without it no edit is detected.

        Returns:
            Ok(SyncOutcome) or Err; never raises.
        """
        invalid = _require_identity(job, "job")
        if invalid:
            logger.warning(f"Rejected job propagation: {invalid.error.message}")
            return invalid

        return await self._isolated(
            f"Job {job.get('id')} sync",
            self._sync_job(job, previous_status, new_status, previous_job),
        )

    async def _sync_job(
        self,
        job: Record,
        previous_status: Optional[str],
        new_status: Optional[str],
        previous_job: Optional[Record],
    ) -> Result[SyncOutcome]:
        owner = str(job["user_id"])
        job_id = str(job["id"])
        was_completed = previous_status == JOB_STATUS_COMPLETED
        is_completed = new_status == JOB_STATUS_COMPLETED

        if not was_completed and is_completed:
            fields = {
                "amount": job.get("amount"),
                "date": job.get("date"),
                "description": _job_description(job),
            }
            return await self._create_derived(
                owner, self.income_category, "income", fields, "job_id", job_id
            )

        if was_completed and not is_completed:
            return await self._delete_derived(owner, "job_id", job_id)

        if was_completed and is_completed:
            if previous_job is None or not _mirrored_fields_changed(previous_job, job):
                return Ok(NOOP)
            changes = {
                "amount": job.get("amount"),
                "date": job.get("date"),
                "description": _job_description(job),
            }
            return await self._mirror_derived(owner, "job_id", job_id, changes)

        return Ok(NOOP)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def on_expense_created(self, expense: Record) -> Result[SyncOutcome]:
        invalid = _require_identity(expense, "expense")
        if invalid:
            logger.warning(f"Rejected expense propagation: {invalid.error.message}")
            return invalid

        fields = {
            "amount": expense.get("amount"),
            "date": expense.get("date"),
            "description": _expense_description(expense),
        }
        return await self._isolated(
            f"Expense {expense.get('id')} create sync",
            self._create_derived(
                str(expense["user_id"]),
                self.expense_category,
                "expense",
                fields,
                "expense_id",
                str(expense["id"]),
            ),
        )

    async def on_expense_updated(self, expense: Record) -> Result[SyncOutcome]:
        invalid = _require_identity(expense, "expense")
        if invalid:
            logger.warning(f"Rejected expense propagation: {invalid.error.message}")
            return invalid

        changes = {
            "amount": expense.get("amount"),
            "date": expense.get("date"),
            "description": _expense_description(expense),
        }
        return await self._isolated(
            f"Expense {expense.get('id')} update sync",
            self._mirror_derived(str(expense["user_id"]), "expense_id", str(expense["id"]), changes),
        )

    async def on_expense_deleted(self, expense: Record) -> Result[SyncOutcome]:
        invalid = _require_identity(expense, "expense")
        if invalid:
            logger.warning(f"Rejected expense propagation: {invalid.error.message}")
            return invalid

        return await self._isolated(
            f"Expense {expense.get('id')} delete sync",
            self._delete_derived(str(expense["user_id"]), "expense_id", str(expense["id"])),
        )

    # ------------------------------------------------------------------
    # Guard
    # ------------------------------------------------------------------

    async def attempt_mutate_transaction(
        self, user_id: str, transaction_id: str, operation: str
    ) -> Result[Record]:
        """
        Check whether a transaction may be edited/deleted directly.

        Fails closed: if the transaction or its job cannot be read, the
        store error is returned and the caller must not proceed.

        Returns:
            Ok(transaction) when allowed, otherwise Err(ValidationError |
            NotFoundError | StoreError | ForbiddenError).
        """
        if not user_id:
            return Err(ValidationError("user_id is required"))
        if operation not in GUARDED_OPERATIONS:
            return Err(ValidationError(f"Invalid operation: {operation}. Must be 'update' or 'delete'"))

        found = await self.store.get_by_id(TRANSACTIONS_TABLE, transaction_id)
        if isinstance(found, Err):
            return found

        transaction = found.value
        if transaction is None or transaction.get("user_id") != user_id:
            return Err(NotFoundError(TRANSACTIONS_TABLE, transaction_id))

        job_id = transaction.get("job_id")
        if not job_id:
            return Ok(transaction)

        job_result = await self.store.get_by_id(JOBS_TABLE, str(job_id))
        if isinstance(job_result, Err):
            logger.error(
                f"Guard could not read job {job_id} for transaction {transaction_id}; refusing {operation}"
            )
            return job_result

        job = job_result.value
        if job is not None and job.get("user_id") == user_id and job.get("status") == JOB_STATUS_COMPLETED:
            verb = "Editing" if operation == "update" else "Deleting"
            logger.warning(
                f"Blocked {operation} of transaction {transaction_id}: linked job {job_id} is completed"
            )
            return Err(ForbiddenError(
                f"{verb} transactions linked to completed jobs is only permitted through the Jobs screen"
            ))

        return Ok(transaction)

    # ------------------------------------------------------------------
    # Event subscriptions
    # ------------------------------------------------------------------

    async def handle_job_created(self, event: JobCreated) -> Result[SyncOutcome]:
        return await self.on_job_status_changed(event.job, None, event.job.get("status"))

    async def handle_job_updated(self, event: JobUpdated) -> Result[SyncOutcome]:
        return await self.on_job_status_changed(
            event.job,
            event.previous.get("status"),
            event.job.get("status"),
            previous_job=event.previous,
        )

    async def handle_expense_created(self, event: ExpenseCreated) -> Result[SyncOutcome]:
        return await self.on_expense_created(event.expense)

    async def handle_expense_updated(self, event: ExpenseUpdated) -> Result[SyncOutcome]:
        return await self.on_expense_updated(event.expense)

    async def handle_expense_deleted(self, event: ExpenseDeleted) -> Result[SyncOutcome]:
        return await self.on_expense_deleted(event.expense)

    def register(self, bus: SyncEventBus) -> None:
        bus.subscribe(JobCreated, self.handle_job_created)
        bus.subscribe(JobUpdated, self.handle_job_updated)
        bus.subscribe(ExpenseCreated, self.handle_expense_created)
        bus.subscribe(ExpenseUpdated, self.handle_expense_updated)
        bus.subscribe(ExpenseDeleted, self.handle_expense_deleted)


def build_synchronizer(store: RecordStore) -> DerivedTransactionSynchronizer:
    """Wire a synchronizer over ``store`` using the configured category policy."""
    resolver = CategoryResolver(store, atomic=settings.ATOMIC_CATEGORY_RESOLUTION)
    return DerivedTransactionSynchronizer(store, resolver)


def build_sync_event_bus(
    store: RecordStore,
    synchronizer: Optional[DerivedTransactionSynchronizer] = None,
) -> SyncEventBus:
    """Create a request-scoped bus with the synchronizer subscribed."""
    bus = SyncEventBus()
    (synchronizer or build_synchronizer(store)).register(bus)
    return bus


__all__ = [
    "SyncOutcome",
    "DerivedTransactionSynchronizer",
    "build_synchronizer",
    "build_sync_event_bus",
    "JOB_DESCRIPTION_PREFIX",
    "EXPENSE_DESCRIPTION_PREFIX",
]
