"""
Pydantic schemas for expense endpoints.

Expenses are extra costs recorded against a job. Each one is mirrored by an
expense transaction in the "Additional Expenses" category.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ExpenseCreateRequest(BaseModel):
    job_id: str = Field(..., description="UUID of the job this cost belongs to")
    amount: float = Field(..., ge=0.0, description="Cost (must be >= 0)", examples=[50.00])
    date: str = Field(..., description="ISO-8601 date of the cost", examples=["2024-01-15"])
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What was bought or paid",
        examples=["Cleaning supplies"]
    )
    category_id: Optional[str] = Field(None, description="Optional category UUID")


class ExpenseUpdateRequest(BaseModel):
    amount: Optional[float] = Field(None, ge=0.0, description="Updated cost")
    date: Optional[str] = Field(None, description="Updated ISO-8601 date")
    description: Optional[str] = Field(None, min_length=1, max_length=500, description="Updated description")
    category_id: Optional[str] = Field(None, description="Updated category UUID")


class ExpenseResponse(BaseModel):
    id: str = Field(..., description="Expense UUID")
    job_id: str = Field(..., description="Job UUID")
    user_id: str = Field(..., description="Owner user UUID")
    category_id: Optional[str] = Field(None, description="Category UUID")
    amount: float
    date: str
    description: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    count: int


class ExpenseCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    expense_id: str
    expense: ExpenseResponse
    message: str = Field(..., examples=["Expense created successfully"])


class ExpenseUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    expense_id: str
    expense: ExpenseResponse
    message: str = Field(..., examples=["Expense updated successfully"])


class ExpenseDeleteResponse(BaseModel):
    status: Literal["DELETED"] = "DELETED"
    expense_id: str
    message: str = Field(..., examples=["Expense deleted successfully"])
