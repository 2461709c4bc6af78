"""
Kit models.

A kit is a fulfillable product bundle. Its packing data is a snapshot of
intended contents (legacy free text, or structured pouches of materials); it
is not a live reference to inventory items.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from sqlalchemy import String, DateTime, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from kitflow.database import Base
from kitflow.db_types import UUIDType, JSONType


class KitStatus(str, Enum):
    """Kit status, a cache of the stock count."""
    IN_STOCK = "in_stock"
    ASSIGNED = "assigned"


def derive_kit_status(stock_count: int) -> str:
    """Status for a given stock count: ``assigned`` iff exactly zero."""
    if stock_count == 0:
        return KitStatus.ASSIGNED.value
    return KitStatus.IN_STOCK.value


class Kit(Base):
    """Kit definition with stock count and packing requirements."""
    __tablename__ = "kits"
    __table_args__ = (
        Index('ix_kits_type', 'type'),
        Index('ix_kits_status', 'status'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Program slug
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    variant: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Storage id of the kit image
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Negative values mean units still to be made
    stock_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Packing data: legacy comma-separated list, or structured pouches
    packing_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pouches: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSONType, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=KitStatus.IN_STOCK.value,
        nullable=False
    )
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

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

    @property
    def is_structured(self) -> bool:
        return self.pouches is not None

    @property
    def is_low_stock(self) -> bool:
        return self.stock_count <= self.low_stock_threshold

    @property
    def units_to_make(self) -> int:
        return max(0, -self.stock_count)

    def set_stock(self, stock_count: int) -> None:
        """Write the stock count and keep the status in step with it."""
        self.stock_count = stock_count
        self.status = derive_kit_status(stock_count)

    def material_names(self) -> List[str]:
        """Names of all materials in the packing data, in listed order."""
        if self.pouches is not None:
            return [
                material["name"]
                for pouch in self.pouches
                for material in pouch.get("materials", [])
            ]
        if not self.packing_requirements:
            return []
        return [
            part.strip()
            for part in self.packing_requirements.split(",")
            if part.strip()
        ]

    def __repr__(self) -> str:
        return f"<Kit(name='{self.name}', type='{self.type}', stock={self.stock_count})>"
