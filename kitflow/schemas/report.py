"""Read-only report schemas."""
from datetime import datetime
from typing import Optional, List, Dict, Union, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from kitflow.schemas.client import ClientResponse


class InventorySummary(BaseModel):
    total_kits: int = 0
    total_stock: int = 0
    low_stock_kits: int = 0
    assigned_count: int = 0
    packed_count: int = 0
    dispatched_count: int = 0
    stock_by_type: Dict[str, int] = Field(default_factory=dict)


class ClientAllocation(BaseModel):
    client: ClientResponse
    total_assigned: int = 0
    assignments: int = 0
    packed: int = 0
    dispatched: int = 0
    upcoming_this_month: int = 0
    upcoming_qty: int = 0


class KitMonthTotal(BaseModel):
    kit_id: UUID
    kit_name: Optional[str] = None
    total_qty: int = 0
    dispatch_dates: List[Optional[datetime]] = Field(default_factory=list)


class GradeBucket(BaseModel):
    grade: Union[int, Literal["unspecified"]]
    total_qty: int = 0
    kits: List[KitMonthTotal] = Field(default_factory=list)


class MonthBucket(BaseModel):
    month: str = Field(..., description="YYYY-MM of assigned_at")
    total_qty: int = 0
    grades: List[GradeBucket] = Field(default_factory=list)


class ClientMonthlyBreakdown(BaseModel):
    client_id: UUID
    months: List[MonthBucket] = Field(default_factory=list)
