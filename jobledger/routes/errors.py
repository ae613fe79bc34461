"""
Mapping from domain errors to HTTP responses.

All error responses share the shape {"detail": {"error": ..., "details": ...}}.
"""

import logging

from fastapi import HTTPException, status

from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)


def ledger_http_exception(error: LedgerError) -> HTTPException:
    """Translate a LedgerError into an HTTPException using its status/error code."""
    if error.status_code >= 500:
        logger.error(f"{type(error).__name__}: {error.message}")
        details = "The record store could not complete the request"
    else:
        details = error.message

    return HTTPException(
        status_code=error.status_code,
        detail={"error": error.error_code, "details": details},
    )


def not_found(resource: str, record_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"{resource} {record_id} not found or not accessible",
        },
    )


def unexpected_error(error_code: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error_code, "details": details},
    )
