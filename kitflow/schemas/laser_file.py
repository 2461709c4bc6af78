from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema


class LaserFileCreate(BaseCreateSchema):
    kit_id: UUID
    file_name: str = Field(..., min_length=1, max_length=255)
    storage_id: str = Field(..., min_length=1, max_length=500)


class LaserFileResponse(BaseResponseSchema):
    id: UUID
    kit_id: UUID
    file_name: str
    storage_id: str
    uploaded_by: Optional[UUID] = None
    uploaded_at: datetime


class UploadUrlResponse(BaseModel):
    """Signed URL the browser uploads to, and the id to store afterwards."""
    upload_url: str
    storage_id: str


class FileUrlResponse(BaseModel):
    storage_id: str
    url: Optional[str] = None
