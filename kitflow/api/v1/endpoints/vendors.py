from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.contact import VendorCreate, VendorUpdate, VendorResponse
from kitflow.services.contact_service import VendorService

router = APIRouter()


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor(data: VendorCreate, db: DB, current_user: CurrentUser):
    return await VendorService(db).create_vendor(data, current_user.id)


@router.get("", response_model=List[VendorResponse])
async def list_vendors(
    db: DB,
    current_user: CurrentUser,
    material_type: Optional[str] = None,
):
    return await VendorService(db).list_vendors(material_type=material_type)


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(vendor_id: UUID, db: DB, current_user: CurrentUser):
    return await VendorService(db).get_vendor_or_404(vendor_id)


@router.patch("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(vendor_id: UUID, data: VendorUpdate, db: DB, current_user: CurrentUser):
    return await VendorService(db).update_vendor(vendor_id, data)


@router.delete("/{vendor_id}", response_model=DeleteResponse)
async def delete_vendor(vendor_id: UUID, db: DB, admin: AdminUser):
    await VendorService(db).delete_vendor(vendor_id)
    return DeleteResponse(id=vendor_id)
