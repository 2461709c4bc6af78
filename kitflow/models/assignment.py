"""
Kit assignment model.

An assignment reserves a quantity of a kit for a client. The quantity is
taken off the kit's stock once, at creation, and given back once if the
assignment is removed before dispatch.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from kitflow.database import Base
from kitflow.db_types import UUIDType


class AssignmentStatus(str, Enum):
    """Assignment progress: assigned -> packed -> dispatched."""
    ASSIGNED = "assigned"
    PACKED = "packed"
    DISPATCHED = "dispatched"


STATUS_ORDER = {
    AssignmentStatus.ASSIGNED.value: 0,
    AssignmentStatus.PACKED.value: 1,
    AssignmentStatus.DISPATCHED.value: 2,
}


class Assignment(Base):
    """Reservation of kit stock for a client."""
    __tablename__ = "assignments"
    __table_args__ = (
        Index('ix_assignments_kit', 'kit_id'),
        Index('ix_assignments_client', 'client_id'),
        Index('ix_assignments_status', 'status'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Plain references: kits and clients may be deleted without cascading
    kit_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    client_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=AssignmentStatus.ASSIGNED.value,
        nullable=False
    )
    grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        nullable=True
    )

    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    dispatched_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_dispatched(self) -> bool:
        return self.status == AssignmentStatus.DISPATCHED.value

    def __repr__(self) -> str:
        return f"<Assignment(kit_id={self.kit_id}, qty={self.quantity}, status='{self.status}')>"
