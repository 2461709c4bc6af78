from typing import List
from uuid import UUID

from fastapi import APIRouter, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.program import ProgramCreate, ProgramUpdate, ProgramResponse
from kitflow.services.program_service import ProgramService

router = APIRouter()


@router.get("", response_model=List[ProgramResponse])
async def list_programs(db: DB, current_user: CurrentUser):
    return await ProgramService(db).list_programs()


@router.post("", response_model=ProgramResponse, status_code=status.HTTP_201_CREATED)
async def create_program(data: ProgramCreate, db: DB, current_user: CurrentUser):
    """Create a program. Slugs are lowercase letters, digits and hyphens."""
    return await ProgramService(db).create_program(data, current_user.id)


@router.patch("/{program_id}", response_model=ProgramResponse)
async def update_program(
    program_id: UUID,
    data: ProgramUpdate,
    db: DB,
    current_user: CurrentUser,
):
    return await ProgramService(db).update_program(program_id, data)


@router.delete("/{program_id}", response_model=DeleteResponse)
async def delete_program(program_id: UUID, db: DB, admin: AdminUser):
    """Delete a program. Fails with 409 while kits still use its slug."""
    await ProgramService(db).delete_program(program_id)
    return DeleteResponse(id=program_id)
