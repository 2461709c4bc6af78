"""
Kit Schemas.

Pydantic schemas for kit definitions and their packing data.
"""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from kitflow.models.kit import KitStatus
from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


# ============================================================================
# PACKING DATA
# ============================================================================

class Material(BaseModel):
    """Material line inside a pouch."""
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., gt=0)
    unit: str = Field(default="pcs", max_length=30)
    notes: Optional[str] = None


class Pouch(BaseModel):
    """Named group of materials packed together."""
    name: str = Field(..., min_length=1, max_length=255)
    materials: List[Material] = Field(default_factory=list)


# ============================================================================
# KIT SCHEMAS
# ============================================================================

class KitCreate(BaseCreateSchema):
    """Schema for creating a kit."""
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100, description="Program slug")
    category: Optional[str] = Field(None, max_length=100)
    variant: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500, description="Storage id")
    stock_count: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=0, ge=0)
    packing_requirements: Optional[str] = Field(
        None, description="Comma-separated material list (unstructured)"
    )
    pouches: Optional[List[Pouch]] = None
    remarks: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=100)


class KitUpdate(BaseUpdateSchema):
    """
    Schema for updating a kit.

    ``stock_count`` is not range-checked here; negative values ("to be
    made") are accepted or rejected by the service according to settings.
    """
    non_nullable_fields = ("name", "type", "stock_count", "low_stock_threshold")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    variant: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    stock_count: Optional[int] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    packing_requirements: Optional[str] = None
    pouches: Optional[List[Pouch]] = None
    remarks: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=100)


class KitCopy(BaseModel):
    """Schema for copying a kit into another program."""
    new_type: str = Field(..., min_length=1, max_length=100)
    new_name: Optional[str] = Field(None, min_length=1, max_length=255)


class KitResponse(BaseResponseSchema):
    """Schema for kit response."""
    id: UUID
    name: str
    type: str
    category: Optional[str] = None
    variant: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    stock_count: int
    low_stock_threshold: int
    packing_requirements: Optional[str] = None
    pouches: Optional[List[Pouch]] = None
    is_structured: bool
    is_low_stock: bool
    units_to_make: int
    status: KitStatus
    remarks: Optional[str] = None
    serial_number: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class KitBrief(BaseResponseSchema):
    """Kit summary embedded in assignment listings."""
    id: UUID
    name: str
    type: str
    stock_count: int
    status: KitStatus
