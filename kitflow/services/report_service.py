"""
Report Service.

Read-only views folded from the current kit, client and assignment rows.
Nothing is cached; every call reflects the store as it is now. All reports
return zeros or empty lists over empty tables.
"""
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, List, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.dates import as_utc, month_bounds, month_key
from kitflow.models.assignment import Assignment, AssignmentStatus
from kitflow.models.client import Client
from kitflow.models.kit import Kit
from kitflow.schemas.client import ClientResponse
from kitflow.schemas.report import (
    InventorySummary, ClientAllocation, ClientMonthlyBreakdown,
    MonthBucket, GradeBucket, KitMonthTotal,
)
from kitflow.services.assignment_service import UNSPECIFIED_GRADE


GRADE_ORDER = list(range(1, 11)) + [UNSPECIFIED_GRADE]


class ReportService:
    """Aggregations for the dashboard and client pages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _all(self, model) -> list:
        result = await self.db.execute(select(model))
        return list(result.scalars().all())

    async def inventory_summary(self) -> InventorySummary:
        """Kit totals, assignment counts per status and stock per program."""
        kits = await self._all(Kit)
        assignments = await self._all(Assignment)

        stock_by_type: Dict[str, int] = defaultdict(int)
        for kit in kits:
            stock_by_type[kit.type] += kit.stock_count

        status_counts: Dict[str, int] = defaultdict(int)
        for assignment in assignments:
            status_counts[assignment.status] += 1

        return InventorySummary(
            total_kits=len(kits),
            total_stock=sum(kit.stock_count for kit in kits),
            low_stock_kits=sum(1 for kit in kits if kit.is_low_stock),
            assigned_count=status_counts[AssignmentStatus.ASSIGNED.value],
            packed_count=status_counts[AssignmentStatus.PACKED.value],
            dispatched_count=status_counts[AssignmentStatus.DISPATCHED.value],
            stock_by_type=dict(stock_by_type),
        )

    async def client_allocation(
        self,
        now: Optional[datetime] = None
    ) -> List[ClientAllocation]:
        """
        Per-client allocation totals.

        "Upcoming" assignments have a dispatch date inside the current UTC
        month and are not yet dispatched.
        """
        now = now or datetime.now(timezone.utc)
        month_start, month_end = month_bounds(now)

        clients = await self._all(Client)
        by_client: Dict[uuid.UUID, List[Assignment]] = defaultdict(list)
        for assignment in await self._all(Assignment):
            by_client[assignment.client_id].append(assignment)

        allocations = []
        for client in sorted(clients, key=lambda c: c.name):
            rows = by_client.get(client.id, [])
            upcoming = [
                a for a in rows
                if a.dispatched_at is not None
                and month_start <= as_utc(a.dispatched_at) < month_end
                and not a.is_dispatched
            ]
            allocations.append(ClientAllocation(
                client=ClientResponse.model_validate(client),
                total_assigned=sum(a.quantity for a in rows),
                assignments=len(rows),
                packed=sum(1 for a in rows if a.status == AssignmentStatus.PACKED.value),
                dispatched=sum(1 for a in rows if a.is_dispatched),
                upcoming_this_month=len(upcoming),
                upcoming_qty=sum(a.quantity for a in upcoming),
            ))
        return allocations

    async def client_monthly_breakdown(self, client_id: uuid.UUID) -> ClientMonthlyBreakdown:
        """
        A client's assignments by month of ``assigned_at`` (newest first),
        then by grade 1-10 and "unspecified", then by kit.
        """
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.client_id == client_id)
            .order_by(Assignment.assigned_at)
        )
        assignments = list(result.scalars().all())

        kit_ids = {a.kit_id for a in assignments}
        kit_names: Dict[uuid.UUID, str] = {}
        if kit_ids:
            kits = await self.db.execute(select(Kit).where(Kit.id.in_(kit_ids)))
            kit_names = {kit.id: kit.name for kit in kits.scalars().all()}

        # month -> grade -> kit_id -> rows
        tree: Dict[str, Dict[object, Dict[uuid.UUID, List[Assignment]]]] = defaultdict(
            lambda: defaultdict(lambda: defaultdict(list))
        )
        for assignment in assignments:
            grade = assignment.grade if assignment.grade is not None else UNSPECIFIED_GRADE
            tree[month_key(assignment.assigned_at)][grade][assignment.kit_id].append(assignment)

        months = []
        for month in sorted(tree, reverse=True):
            grades = []
            for grade in GRADE_ORDER:
                kits = tree[month].get(grade)
                if not kits:
                    continue
                kit_totals = [
                    KitMonthTotal(
                        kit_id=kit_id,
                        kit_name=kit_names.get(kit_id),
                        total_qty=sum(a.quantity for a in rows),
                        dispatch_dates=[as_utc(a.dispatched_at) for a in rows],
                    )
                    for kit_id, rows in kits.items()
                ]
                grades.append(GradeBucket(
                    grade=grade,
                    total_qty=sum(k.total_qty for k in kit_totals),
                    kits=kit_totals,
                ))
            months.append(MonthBucket(
                month=month,
                total_qty=sum(g.total_qty for g in grades),
                grades=grades,
            ))

        return ClientMonthlyBreakdown(client_id=client_id, months=months)
