"""
Pydantic schemas for transaction CRUD endpoints.

Transactions are ledger entries (income or expense). Organic transactions
are entered by the user; derived ones (is_derived = true) mirror a completed
job or a job expense and carry job_id / expense_id back-references.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TransactionType = Literal["income", "expense"]


# --- Transaction creation models ---

class TransactionCreateRequest(BaseModel):
    """
    Request to create an organic transaction.

    Derived transactions cannot be created through this endpoint.
    """
    category_id: str = Field(..., description="UUID of the spending/earning category")
    type: TransactionType = Field(
        ...,
        description="Money direction: 'income' (money in) or 'expense' (money out)"
    )
    amount: float = Field(
        ...,
        description="Transaction amount (must be >= 0)",
        ge=0.0,
        examples=[128.50, 1500.00]
    )
    date: str = Field(
        ...,
        description="ISO-8601 date when the transaction occurred",
        examples=["2024-01-15"]
    )
    description: Optional[str] = Field(
        None,
        description="Human-readable description/note for this transaction",
        examples=["Monthly phone plan"]
    )


# --- Transaction update models ---

class TransactionUpdateRequest(BaseModel):
    """
    Request to update an existing transaction.

    All fields are optional - only provided fields will be updated.
    Rejected with 403 when the transaction belongs to a completed job.
    """
    category_id: Optional[str] = Field(None, description="Updated category UUID")
    type: Optional[TransactionType] = Field(None, description="Updated money direction")
    amount: Optional[float] = Field(
        None,
        description="Updated transaction amount (must be >= 0)",
        ge=0.0
    )
    date: Optional[str] = Field(None, description="Updated ISO-8601 date")
    description: Optional[str] = Field(None, description="Updated description/note")


# --- Transaction response models ---

class TransactionDetailResponse(BaseModel):
    """Single transaction, organic or derived."""
    id: str = Field(..., description="Transaction UUID")
    user_id: str = Field(..., description="Owner user UUID")
    type: TransactionType = Field(..., description="Money direction")
    category_id: str = Field(..., description="Category UUID")
    amount: float = Field(..., description="Transaction amount")
    date: str = Field(..., description="ISO-8601 date when transaction occurred")
    description: Optional[str] = Field(None, description="Transaction description/note")
    job_id: Optional[str] = Field(None, description="Originating job UUID (derived income)")
    expense_id: Optional[str] = Field(None, description="Originating expense UUID (derived expense)")
    is_derived: bool = Field(False, description="True when maintained automatically from a job/expense")
    created_at: Optional[str] = Field(None, description="ISO-8601 timestamp when record was created")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class TransactionListResponse(BaseModel):
    transactions: List[TransactionDetailResponse] = Field(..., description="List of transaction records")
    count: int = Field(..., description="Total number of transactions returned")
    limit: int = Field(..., description="Limit used for pagination")
    offset: int = Field(..., description="Offset used for pagination")


class TransactionCreateResponse(BaseModel):
    status: Literal["CREATED"] = Field("CREATED", description="Transaction was created")
    transaction_id: str = Field(..., description="UUID of created transaction record")
    transaction: TransactionDetailResponse
    message: str = Field(..., examples=["Transaction created successfully"])


class TransactionUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field("UPDATED", description="Transaction was updated")
    transaction_id: str = Field(..., description="UUID of updated transaction record")
    transaction: TransactionDetailResponse
    message: str = Field(..., examples=["Transaction updated successfully"])


class TransactionDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field("DELETED", description="Transaction was deleted")
    transaction_id: str = Field(..., description="UUID of deleted transaction record")
    message: str = Field(..., examples=["Transaction deleted successfully"])
