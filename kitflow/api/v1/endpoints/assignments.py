"""
Assignment API Endpoints.

Reserving kit stock for clients and tracking it through packing and
dispatch, plus the admin housekeeping clears.
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Query, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.schemas.assignment import (
    AssignmentCreate, AssignmentStatusUpdate, AssignmentResponse, AssignmentDetail,
    ClientMonthDispatchSet, ClientMonthDispatchClear,
    BulkUpdateResult, ClearResult, KitClearResult,
)
from kitflow.schemas.client import ClientBrief
from kitflow.schemas.kit import KitBrief
from kitflow.services.assignment_service import AssignmentService

router = APIRouter()


def _detail(row: dict) -> AssignmentDetail:
    detail = AssignmentDetail.model_validate(row["assignment"])
    if row["kit"] is not None:
        detail.kit = KitBrief.model_validate(row["kit"])
    if row["client"] is not None:
        detail.client = ClientBrief.model_validate(row["client"])
    return detail


# ============================================================================
# ASSIGNMENTS
# ============================================================================

@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign Kit To Client"
)
async def create_assignment(data: AssignmentCreate, db: DB, current_user: CurrentUser):
    """
    Reserve kit stock for a client.

    Fails with 409 when the kit has fewer units than requested. Send an
    ``idempotency_key`` to make retries safe.
    """
    return await AssignmentService(db).create_assignment(data, current_user.id)


@router.get(
    "",
    response_model=List[AssignmentDetail],
    summary="List Assignments"
)
async def list_assignments(
    db: DB,
    current_user: CurrentUser,
    limit: Optional[int] = Query(None, ge=1, le=1000),
):
    """All assignments with their kit and client, newest first."""
    rows = await AssignmentService(db).list_with_details(limit=limit)
    return [_detail(row) for row in rows]


@router.get(
    "/by-client/{client_id}",
    response_model=List[AssignmentDetail],
    summary="List Client Assignments"
)
async def list_client_assignments(client_id: UUID, db: DB, current_user: CurrentUser):
    rows = await AssignmentService(db).list_with_details(client_id=client_id)
    return [_detail(row) for row in rows]


@router.post(
    "/clear-pending",
    response_model=ClearResult,
    summary="Clear Pending Assignments"
)
async def clear_all_pending(db: DB, admin: AdminUser):
    """Delete every undispatched assignment and give the stock back."""
    deleted = await AssignmentService(db).clear_all_pending()
    return ClearResult(deleted_count=deleted)


@router.post(
    "/clear-all",
    response_model=ClearResult,
    summary="Clear All Assignments"
)
async def clear_all(db: DB, admin: AdminUser):
    """Delete every assignment. Dispatched ones do not give stock back."""
    deleted = await AssignmentService(db).clear_all()
    return ClearResult(deleted_count=deleted)


@router.post(
    "/by-client/{client_id}/dispatch-date",
    response_model=BulkUpdateResult,
    summary="Set Dispatch Date For Client Month"
)
async def set_client_month_dispatch_date(
    client_id: UUID,
    data: ClientMonthDispatchSet,
    db: DB,
    current_user: CurrentUser,
):
    """Set the dispatch date on a client's assignments made in one month."""
    updated = await AssignmentService(db).set_dispatch_date_for_client_month(
        client_id,
        data.month,
        data.dispatched_at,
        mark_dispatched=data.mark_dispatched,
        grade=data.grade,
    )
    return BulkUpdateResult(updated_count=updated)


@router.post(
    "/by-client/{client_id}/dispatch-date/clear",
    response_model=BulkUpdateResult,
    summary="Clear Dispatch Date For Client Month"
)
async def clear_client_month_dispatch_date(
    client_id: UUID,
    data: ClientMonthDispatchClear,
    db: DB,
    current_user: CurrentUser,
):
    updated = await AssignmentService(db).clear_dispatch_date_for_client_month(
        client_id,
        data.month,
        grade=data.grade,
        mark_assigned=data.mark_assigned,
    )
    return BulkUpdateResult(updated_count=updated)


@router.get(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    summary="Get Assignment"
)
async def get_assignment(assignment_id: UUID, db: DB, current_user: CurrentUser):
    return await AssignmentService(db).get_assignment_or_404(assignment_id)


@router.patch(
    "/{assignment_id}/status",
    response_model=AssignmentResponse,
    summary="Update Assignment Status"
)
async def update_assignment_status(
    assignment_id: UUID,
    data: AssignmentStatusUpdate,
    db: DB,
    current_user: CurrentUser,
):
    """Move an assignment between assigned, packed and dispatched. No stock change."""
    return await AssignmentService(db).update_status(assignment_id, data.status)


@router.delete(
    "/{assignment_id}",
    response_model=KitClearResult,
    summary="Delete Assignment"
)
async def delete_assignment(assignment_id: UUID, db: DB, admin: AdminUser):
    """Delete one assignment, giving its stock back unless it was dispatched."""
    restored = await AssignmentService(db).delete_assignment(assignment_id)
    return KitClearResult(deleted_count=1, restored_qty=restored)
