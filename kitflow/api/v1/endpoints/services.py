from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.contact import (
    ServiceProviderCreate, ServiceProviderUpdate, ServiceProviderResponse
)
from kitflow.services.contact_service import ServiceProviderService

router = APIRouter()


@router.post("", response_model=ServiceProviderResponse, status_code=status.HTTP_201_CREATED)
async def create_service(data: ServiceProviderCreate, db: DB, current_user: CurrentUser):
    return await ServiceProviderService(db).create_service(data, current_user.id)


@router.get("", response_model=List[ServiceProviderResponse])
async def list_services(
    db: DB,
    current_user: CurrentUser,
    service_type: Optional[str] = None,
):
    return await ServiceProviderService(db).list_services(service_type=service_type)


@router.get("/{service_id}", response_model=ServiceProviderResponse)
async def get_service(service_id: UUID, db: DB, current_user: CurrentUser):
    return await ServiceProviderService(db).get_service_or_404(service_id)


@router.patch("/{service_id}", response_model=ServiceProviderResponse)
async def update_service(
    service_id: UUID,
    data: ServiceProviderUpdate,
    db: DB,
    current_user: CurrentUser,
):
    return await ServiceProviderService(db).update_service(service_id, data)


@router.delete("/{service_id}", response_model=DeleteResponse)
async def delete_service(service_id: UUID, db: DB, admin: AdminUser):
    await ServiceProviderService(db).delete_service(service_id)
    return DeleteResponse(id=service_id)
