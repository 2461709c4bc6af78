"""
Assignment Schemas.

Commands and responses for the assignment lifecycle.
"""
from datetime import datetime
from typing import Annotated, Optional, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

from kitflow.models.assignment import AssignmentStatus
from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema
from kitflow.schemas.kit import KitBrief
from kitflow.schemas.client import ClientBrief


MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

# A grade 1-10, or "unspecified" to select assignments without a grade
GradeFilter = Union[Literal["unspecified"], Annotated[int, Field(ge=1, le=10)]]


class AssignmentCreate(BaseCreateSchema):
    """Schema for assigning kit stock to a client."""
    kit_id: UUID
    client_id: UUID
    quantity: int = Field(..., gt=0)
    notes: Optional[str] = None
    grade: Optional[int] = Field(None, ge=1, le=10)
    dispatched_at: Optional[datetime] = None
    idempotency_key: Optional[str] = Field(
        None,
        max_length=100,
        description="Repeat a create with the same key to get the original assignment back"
    )


class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus


class ClientMonthDispatchSet(BaseModel):
    """Set the dispatch date on a client's assignments for one month."""
    month: str = Field(..., pattern=MONTH_PATTERN, description="YYYY-MM")
    dispatched_at: datetime
    mark_dispatched: bool = False
    grade: Optional[GradeFilter] = Field(None, description="1-10 or 'unspecified'")


class ClientMonthDispatchClear(BaseModel):
    """Clear the dispatch date on a client's assignments for one month."""
    month: str = Field(..., pattern=MONTH_PATTERN, description="YYYY-MM")
    mark_assigned: bool = False
    grade: Optional[GradeFilter] = Field(None, description="1-10 or 'unspecified'")


class AssignmentResponse(BaseResponseSchema):
    id: UUID
    kit_id: UUID
    client_id: UUID
    quantity: int
    status: AssignmentStatus
    grade: Optional[int] = None
    notes: Optional[str] = None
    assigned_by: Optional[UUID] = None
    assigned_at: datetime
    updated_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None


class AssignmentDetail(AssignmentResponse):
    """Assignment with its kit and client; either is null once deleted."""
    kit: Optional[KitBrief] = None
    client: Optional[ClientBrief] = None


class BulkUpdateResult(BaseModel):
    updated_count: int


class ClearResult(BaseModel):
    deleted_count: int


class KitClearResult(BaseModel):
    deleted_count: int
    restored_qty: int
