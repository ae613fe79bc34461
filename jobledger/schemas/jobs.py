"""
Pydantic schemas for job endpoints.

A job is a unit of paid work for a client. Completing a job books an
income transaction in the "Services Rendered" category; moving it out of
'completed' removes that transaction again.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

JobStatus = Literal["in_progress", "completed", "canceled"]


class JobCreateRequest(BaseModel):
    """Request to create a job (in any status)."""
    client_id: str = Field(..., description="UUID of the client the work is for")
    amount: float = Field(
        ...,
        ge=0.0,
        description="Price charged for the job (must be >= 0)",
        examples=[240.00]
    )
    date: str = Field(
        ...,
        description="ISO-8601 date the job takes place",
        examples=["2024-01-15"]
    )
    description: Optional[str] = Field(
        None,
        max_length=500,
        description="Free-text description",
        examples=["Deep clean, 3-bedroom apartment"]
    )
    status: JobStatus = Field("in_progress", description="Initial status")
    location: Optional[str] = Field(None, max_length=300, description="Address or area")


class JobUpdateRequest(BaseModel):
    """
    Partial job update. Changing status is how a job is completed,
    reopened or canceled.
    """
    client_id: Optional[str] = Field(None, description="Updated client UUID")
    amount: Optional[float] = Field(None, ge=0.0, description="Updated price")
    status: Optional[JobStatus] = Field(None, description="Updated status")
    date: Optional[str] = Field(None, description="Updated ISO-8601 date")
    description: Optional[str] = Field(None, max_length=500, description="Updated description")
    location: Optional[str] = Field(None, max_length=300, description="Updated location")


class JobResponse(BaseModel):
    id: str = Field(..., description="Job UUID")
    user_id: str = Field(..., description="Owner user UUID")
    client_id: str = Field(..., description="Client UUID")
    amount: float = Field(..., description="Price charged")
    status: JobStatus = Field(..., description="Current status")
    date: str = Field(..., description="ISO-8601 date")
    description: Optional[str] = Field(None, description="Free-text description")
    location: Optional[str] = Field(None, description="Address or area")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")


class JobListResponse(BaseModel):
    jobs: List[JobResponse] = Field(..., description="The user's jobs, newest first")
    count: int = Field(..., description="Number of jobs returned")


class JobCreateResponse(BaseModel):
    status: Literal["CREATED"] = Field("CREATED", description="Job was created")
    job_id: str = Field(..., description="UUID of the created job")
    job: JobResponse
    message: str = Field(..., examples=["Job created successfully"])


class JobUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field("UPDATED", description="Job was updated")
    job_id: str = Field(..., description="UUID of the updated job")
    job: JobResponse
    message: str = Field(..., examples=["Job updated successfully"])


class JobDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field("DELETED", description="Job was deleted")
    job_id: str = Field(..., description="UUID of the deleted job")
    message: str = Field(..., examples=["Job deleted successfully"])


class JobProfitResponse(BaseModel):
    """Revenue of a job against the expenses recorded on it."""
    job_id: str
    status: JobStatus
    revenue: float = Field(..., description="Job amount")
    expenses: float = Field(..., description="Sum of the job's expenses")
    profit: float = Field(..., description="revenue - expenses")
    expense_count: int
