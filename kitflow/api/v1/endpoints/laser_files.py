from typing import Annotated, Optional, List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from kitflow.api.deps import DB, CurrentUser, AdminUser, get_storage
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.laser_file import LaserFileCreate, LaserFileResponse
from kitflow.services.laser_file_service import LaserFileService

router = APIRouter()


@router.get("", response_model=List[LaserFileResponse])
async def list_laser_files(
    db: DB,
    current_user: CurrentUser,
    kit_id: Optional[UUID] = None,
):
    return await LaserFileService(db).list_files(kit_id)


@router.post("", response_model=LaserFileResponse, status_code=status.HTTP_201_CREATED)
async def create_laser_file(data: LaserFileCreate, db: DB, current_user: CurrentUser):
    """Attach an uploaded file to a kit."""
    return await LaserFileService(db).create_file(data, current_user.id)


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_laser_file(
    file_id: UUID,
    db: DB,
    admin: AdminUser,
    storage: Annotated[object, Depends(get_storage)],
):
    """Delete the stored file and its record."""
    await LaserFileService(db, storage).delete_file(file_id)
    return DeleteResponse(id=file_id)
