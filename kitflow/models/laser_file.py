import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from kitflow.database import Base
from kitflow.db_types import UUIDType


class LaserFile(Base):
    """Laser-cutting design file attached to a kit. The blob lives in storage."""
    __tablename__ = "laser_files"
    __table_args__ = (
        Index('ix_laser_files_kit', 'kit_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    kit_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_id: Mapped[str] = mapped_column(String(500), nullable=False)

    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
