from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.models.client import ClientType
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from kitflow.services.client_service import ClientService

router = APIRouter()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(data: ClientCreate, db: DB, current_user: CurrentUser):
    return await ClientService(db).create_client(data, current_user.id)


@router.get("", response_model=List[ClientResponse])
async def list_clients(
    db: DB,
    current_user: CurrentUser,
    type: Optional[ClientType] = None,
    search: Optional[str] = None,
):
    return await ClientService(db).list_clients(client_type=type, search=search)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: UUID, db: DB, current_user: CurrentUser):
    return await ClientService(db).get_client_or_404(client_id)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: UUID, data: ClientUpdate, db: DB, current_user: CurrentUser):
    return await ClientService(db).update_client(client_id, data)


@router.delete("/{client_id}", response_model=DeleteResponse)
async def delete_client(client_id: UUID, db: DB, admin: AdminUser):
    await ClientService(db).delete_client(client_id)
    return DeleteResponse(id=client_id)
