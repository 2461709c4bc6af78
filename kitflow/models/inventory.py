"""
Inventory models.

- InventoryItem: raw materials, pre-processed parts and finished goods
- InventoryCategory: custom subcategories for raw and pre-processed items
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from kitflow.database import Base
from kitflow.db_types import UUIDType


class InventoryCategoryType(str, Enum):
    """Top-level inventory category."""
    RAW_MATERIAL = "raw_material"
    PRE_PROCESSED = "pre_processed"
    FINISHED_GOOD = "finished_good"


class SubcategoryType(str, Enum):
    """Categories that accept custom subcategories."""
    RAW_MATERIAL = "raw_material"
    PRE_PROCESSED = "pre_processed"


class InventoryItem(Base):
    """Stocked item. Quantity moves by signed deltas and never drops below zero."""
    __tablename__ = "inventory"
    __table_args__ = (
        Index('ix_inventory_category', 'category'),
        Index('ix_inventory_category_sub_category', 'category', 'sub_category'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    sub_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )


class InventoryCategory(Base):
    """Custom subcategory definition."""
    __tablename__ = "inventory_categories"
    __table_args__ = (
        Index('ix_inventory_categories_category_type', 'category_type'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    category_type: Mapped[str] = mapped_column(String(30), nullable=False)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
