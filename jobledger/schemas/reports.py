"""
Pydantic models for report endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field


class FinancialSummaryResponse(BaseModel):
    """Totals over the user's ledger, organic and derived transactions alike."""
    total_income: float = Field(..., description="Sum of income transactions")
    total_expenses: float = Field(..., description="Sum of expense transactions")
    balance: float = Field(..., description="total_income - total_expenses")
    transaction_count: int = Field(..., description="Transactions in the range")
    from_date: Optional[str] = Field(None, description="Inclusive lower date bound")
    to_date: Optional[str] = Field(None, description="Inclusive upper date bound")
