from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kitflow.models.inventory import InventoryCategoryType, SubcategoryType
from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


# ==================== Inventory Items ====================

class InventoryItemCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    category: InventoryCategoryType
    sub_category: Optional[str] = Field(None, max_length=100)
    unit: Optional[str] = Field(None, max_length=30)
    quantity: int = Field(default=0, ge=0)
    notes: Optional[str] = None


class InventoryItemUpdate(BaseUpdateSchema):
    """Quantity is changed through stock adjustments only."""
    non_nullable_fields = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sub_category: Optional[str] = Field(None, max_length=100)
    unit: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None


class StockAdjustment(BaseModel):
    delta: int = Field(..., description="Positive to add, negative to remove")


class StockAdjustmentResult(BaseModel):
    id: UUID
    quantity: int


class InventoryItemResponse(BaseResponseSchema):
    id: UUID
    name: str
    category: InventoryCategoryType
    sub_category: Optional[str] = None
    unit: Optional[str] = None
    quantity: int
    notes: Optional[str] = None
    created_at: datetime


# ==================== Inventory Categories ====================

class InventoryCategoryCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1, max_length=100)
    category_type: SubcategoryType


class InventoryCategoryResponse(BaseResponseSchema):
    id: UUID
    name: str
    value: str
    category_type: SubcategoryType
    created_at: datetime
