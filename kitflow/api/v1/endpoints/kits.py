"""
Kit API Endpoints.

- Kit definitions with packing data (free text or structured pouches)
- Low-stock list
- Copying a kit into another program
- Clearing a kit's pending assignments
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Query, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.models.kit import KitStatus
from kitflow.schemas.assignment import KitClearResult
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.kit import KitCreate, KitUpdate, KitCopy, KitResponse
from kitflow.services.assignment_service import AssignmentService
from kitflow.services.kit_service import KitService

router = APIRouter()


# ============================================================================
# KITS
# ============================================================================

@router.post(
    "",
    response_model=KitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Kit"
)
async def create_kit(data: KitCreate, db: DB, current_user: CurrentUser):
    """Create a new kit. Opening stock may not be negative."""
    return await KitService(db).create_kit(data, current_user.id)


@router.get(
    "",
    response_model=List[KitResponse],
    summary="List Kits"
)
async def list_kits(
    db: DB,
    current_user: CurrentUser,
    type: Optional[str] = Query(None, description="Program slug"),
    status: Optional[KitStatus] = None,
    search: Optional[str] = None,
):
    """List kits."""
    return await KitService(db).list_kits(kit_type=type, status=status, search=search)


@router.get(
    "/low-stock",
    response_model=List[KitResponse],
    summary="Low Stock Kits"
)
async def get_low_stock_kits(db: DB, current_user: CurrentUser):
    """Kits with stock at or below their threshold."""
    return await KitService(db).get_low_stock_kits()


@router.get(
    "/{kit_id}",
    response_model=KitResponse,
    summary="Get Kit"
)
async def get_kit(kit_id: UUID, db: DB, current_user: CurrentUser):
    return await KitService(db).get_kit_or_404(kit_id)


@router.patch(
    "/{kit_id}",
    response_model=KitResponse,
    summary="Update Kit"
)
async def update_kit(kit_id: UUID, data: KitUpdate, db: DB, current_user: CurrentUser):
    """
    Update a kit.

    Supplying ``stock_count`` recomputes the status. Negative stock records
    units still to be made.
    """
    return await KitService(db).update_kit(kit_id, data)


@router.delete(
    "/{kit_id}",
    response_model=DeleteResponse,
    summary="Delete Kit"
)
async def delete_kit(kit_id: UUID, db: DB, admin: AdminUser):
    """Delete a kit. Its assignments are kept."""
    await KitService(db).delete_kit(kit_id)
    return DeleteResponse(id=kit_id)


@router.post(
    "/{kit_id}/copy",
    response_model=KitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Copy Kit"
)
async def copy_kit(kit_id: UUID, data: KitCopy, db: DB, current_user: CurrentUser):
    """Copy a kit's packing data into a new kit with zero stock."""
    return await KitService(db).copy_kit(kit_id, data, current_user.id)


@router.post(
    "/{kit_id}/clear-pending",
    response_model=KitClearResult,
    summary="Clear Pending Assignments For Kit"
)
async def clear_pending_for_kit(kit_id: UUID, db: DB, admin: AdminUser):
    """Delete the kit's undispatched assignments and give their stock back."""
    result = await AssignmentService(db).clear_pending_by_kit(kit_id)
    return KitClearResult(**result)
