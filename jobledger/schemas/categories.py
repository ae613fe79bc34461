"""
Pydantic models for category endpoints.

Categories label transactions. Names are unique per user within a type.
"Services Rendered" (income) and "Additional Expenses" (expense) are created
automatically the first time a job is completed / an expense is recorded.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

CategoryType = Literal["income", "expense", "both"]


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category display name")
    type: CategoryType = Field(..., description="'income', 'expense' or 'both'")


class CategoryResponse(BaseModel):
    id: str = Field(..., description="Category UUID")
    user_id: str = Field(..., description="Owner user UUID")
    name: str = Field(..., description="Category display name")
    type: CategoryType = Field(..., description="Money direction the category applies to")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")


class CategoryListResponse(BaseModel):
    categories: List[CategoryResponse]
    count: int


class CategoryCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    category: CategoryResponse
    message: str = Field(..., examples=["Category created successfully"])


class CategoryDeleteResponse(BaseModel):
    status: Literal["DELETED"] = "DELETED"
    category_id: str
    message: str = Field(..., examples=["Category deleted successfully"])
