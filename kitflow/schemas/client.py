from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from kitflow.models.client import ClientType
from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


class ClientCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    organization: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=100)
    type: ClientType
    email: Optional[EmailStr] = None
    notes: Optional[str] = None


class ClientUpdate(BaseUpdateSchema):
    non_nullable_fields = ("name", "organization", "contact", "type")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    organization: Optional[str] = Field(None, min_length=1, max_length=255)
    contact: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ClientType] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None


class ClientResponse(BaseResponseSchema):
    id: UUID
    name: str
    organization: str
    contact: str
    type: ClientType
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class ClientBrief(BaseResponseSchema):
    """Client summary embedded in assignment listings."""
    id: UUID
    name: str
    organization: str
    type: ClientType
