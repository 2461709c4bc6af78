import logging
import uuid
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.exceptions import NotFound
from kitflow.core.storage import StorageClient
from kitflow.models.laser_file import LaserFile
from kitflow.schemas.laser_file import LaserFileCreate


logger = logging.getLogger(__name__)


class LaserFileService:
    """Laser-cutting files attached to kits. Blobs live in storage."""

    def __init__(self, db: AsyncSession, storage=StorageClient):
        self.db = db
        self.storage = storage

    async def list_files(self, kit_id: Optional[uuid.UUID] = None) -> List[LaserFile]:
        query = select(LaserFile)
        if kit_id:
            query = query.where(LaserFile.kit_id == kit_id)
        result = await self.db.execute(query.order_by(LaserFile.uploaded_at.desc()))
        return list(result.scalars().all())

    async def create_file(
        self,
        data: LaserFileCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> LaserFile:
        """Record a file the client has already uploaded to storage."""
        laser_file = LaserFile(
            kit_id=data.kit_id,
            file_name=data.file_name,
            storage_id=data.storage_id,
            uploaded_by=user_id,
        )
        self.db.add(laser_file)
        await self.db.commit()
        await self.db.refresh(laser_file)
        logger.info(f"Laser file {laser_file.file_name} attached to kit {laser_file.kit_id}")
        return laser_file

    async def delete_file(self, file_id: uuid.UUID) -> None:
        """Delete the stored blob, then the record."""
        result = await self.db.execute(select(LaserFile).where(LaserFile.id == file_id))
        laser_file = result.scalar_one_or_none()
        if not laser_file:
            raise NotFound("Laser file not found")

        self.storage.delete(laser_file.storage_id)
        await self.db.delete(laser_file)
        await self.db.commit()
        logger.info(f"Laser file deleted: {file_id}")
