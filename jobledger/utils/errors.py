"""
Error taxonomy for the Job Ledger backend.

Services raise these (or carry them inside ``Err`` results); routes map them
to HTTP status codes via ``status_code``.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all domain errors."""

    error_code = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed input, rejected before any store call."""

    error_code = "invalid_request"
    status_code = 400


class NotFoundError(LedgerError):
    """Referenced record is absent or owned by someone else."""

    error_code = "not_found"
    status_code = 404

    def __init__(self, table: str, record_id: Optional[str]):
        super().__init__(f"{table} record {record_id} not found or not accessible")
        self.table = table
        self.record_id = record_id


class ConflictError(LedgerError):
    """Uniqueness rule violated (e.g. duplicate category name)."""

    error_code = "conflict"
    status_code = 409


class StoreError(LedgerError):
    """The record store failed. ``code`` holds the Postgres SQLSTATE when known."""

    error_code = "store_error"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ForbiddenError(LedgerError):
    """Operation rejected by a business guard."""

    error_code = "forbidden"
    status_code = 403
