from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import Field

from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


class ProgramCreate(BaseCreateSchema):
    """Slug format is checked by the service so the caller gets a domain error."""
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    categories: Optional[List[str]] = None


class ProgramUpdate(BaseUpdateSchema):
    """The slug is immutable; kits reference it."""
    non_nullable_fields = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    categories: Optional[List[str]] = None


class ProgramResponse(BaseResponseSchema):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    categories: Optional[List[str]] = None
    created_at: datetime
