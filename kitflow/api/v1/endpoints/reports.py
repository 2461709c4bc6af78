from typing import List
from uuid import UUID

from fastapi import APIRouter

from kitflow.api.deps import DB, CurrentUser
from kitflow.schemas.report import InventorySummary, ClientAllocation, ClientMonthlyBreakdown
from kitflow.services.report_service import ReportService

router = APIRouter()


@router.get("/inventory-summary", response_model=InventorySummary)
async def get_inventory_summary(db: DB, current_user: CurrentUser):
    """Kit and stock totals, assignment counts by status, stock by program."""
    return await ReportService(db).inventory_summary()


@router.get("/client-allocation", response_model=List[ClientAllocation])
async def get_client_allocation(db: DB, current_user: CurrentUser):
    """Per-client allocation, including dispatches due this month."""
    return await ReportService(db).client_allocation()


@router.get("/clients/{client_id}/monthly", response_model=ClientMonthlyBreakdown)
async def get_client_monthly_breakdown(client_id: UUID, db: DB, current_user: CurrentUser):
    """A client's assignments by month, grade and kit."""
    return await ReportService(db).client_monthly_breakdown(client_id)
