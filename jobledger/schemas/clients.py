"""
Pydantic models for client endpoints.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ClientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Client name")
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = Field(None, max_length=1000)


class ClientUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = Field(None, max_length=1000)


class ClientResponse(BaseModel):
    id: str
    user_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ClientListResponse(BaseModel):
    clients: List[ClientResponse]
    count: int


class ClientDeleteResponse(BaseModel):
    status: Literal["DELETED"] = "DELETED"
    client_id: str
    message: str = Field(..., examples=["Client deleted successfully"])
