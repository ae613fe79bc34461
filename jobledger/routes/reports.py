"""
Report API endpoints.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, unexpected_error
from jobledger.schemas.reports import FinancialSummaryResponse
from jobledger.services import get_financial_summary
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/summary",
    response_model=FinancialSummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Income/expense summary",
    description="""
    Total income, total expenses and balance over the user's transactions.

    Completed jobs and job expenses are included through their derived
    transactions.
    """
)
async def get_summary(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    from_date: Optional[str] = Query(None, description="Inclusive start date (ISO-8601)"),
    to_date: Optional[str] = Query(None, description="Inclusive end date (ISO-8601)"),
) -> FinancialSummaryResponse:
    logger.info(f"Building summary for user {auth_user.user_id} ({from_date} .. {to_date})")

    store = get_record_store(auth_user.access_token)

    try:
        summary = await get_financial_summary(store, auth_user.user_id, from_date, to_date)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to build summary: {e}", exc_info=True)
        raise unexpected_error("report_error", "Failed to compute financial summary")

    return FinancialSummaryResponse(**summary)
