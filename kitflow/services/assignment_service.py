"""
Assignment Service - kit stock reservation and dispatch lifecycle.

Stock accounting:
1. create() takes the assignment quantity off the kit's stock, in the same
   transaction that inserts the assignment.
2. Status moves (assigned -> packed -> dispatched) and dispatch dates never
   touch stock.
3. Deleting an assignment that has not been dispatched gives its quantity
   back to the kit, once. Dispatched units have left inventory and are never
   given back.

Bulk clears work on a snapshot selected at the start of the call, locked
with SELECT ... FOR UPDATE on databases that support it, and commit once.
"""
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, List, Dict, Iterable, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.dates import month_key
from kitflow.core.exceptions import InsufficientStock, NotFound
from kitflow.models.assignment import Assignment, AssignmentStatus, STATUS_ORDER
from kitflow.models.client import Client
from kitflow.models.kit import Kit
from kitflow.schemas.assignment import AssignmentCreate


logger = logging.getLogger(__name__)

UNSPECIFIED_GRADE = "unspecified"


def matches_grade(assignment: Assignment, grade: Optional[Union[int, str]]) -> bool:
    """Grade filter: None matches all, "unspecified" matches ungraded only."""
    if grade is None:
        return True
    if grade == UNSPECIFIED_GRADE:
        return assignment.grade is None
    return assignment.grade == grade


class AssignmentService:
    """Service for kit assignments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_assignment(
        self,
        data: AssignmentCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> Assignment:
        """
        Reserve kit stock for a client.

        Raises InsufficientStock if the kit is missing or holds fewer units
        than requested; nothing is written in that case. A repeated
        ``idempotency_key`` returns the original assignment without touching
        stock again.
        """
        if data.idempotency_key:
            existing = await self._get_by_idempotency_key(data.idempotency_key)
            if existing:
                logger.info(
                    f"Assignment create replayed for key {data.idempotency_key}"
                )
                return existing

        kit = await self._get_kit_for_update(data.kit_id)
        if not kit or kit.stock_count < data.quantity:
            raise InsufficientStock(
                "Insufficient stock" if kit else "Insufficient stock: kit not found"
            )

        now = datetime.now(timezone.utc)
        assignment = Assignment(
            kit_id=data.kit_id,
            client_id=data.client_id,
            quantity=data.quantity,
            notes=data.notes,
            grade=data.grade,
            status=AssignmentStatus.ASSIGNED.value,
            idempotency_key=data.idempotency_key,
            assigned_by=user_id,
            assigned_at=now,
            dispatched_at=data.dispatched_at,
        )
        self.db.add(assignment)
        kit.set_stock(kit.stock_count - data.quantity)

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request with the same key won the race
            await self.db.rollback()
            if data.idempotency_key:
                existing = await self._get_by_idempotency_key(data.idempotency_key)
                if existing:
                    return existing
            raise

        await self.db.refresh(assignment)
        logger.info(
            f"Assigned {data.quantity} x kit {data.kit_id} to client {data.client_id}; "
            f"kit stock now {kit.stock_count}"
        )
        return assignment

    # =========================================================================
    # READ
    # =========================================================================

    async def get_assignment(self, assignment_id: uuid.UUID) -> Optional[Assignment]:
        result = await self.db.execute(
            select(Assignment).where(Assignment.id == assignment_id)
        )
        return result.scalar_one_or_none()

    async def get_assignment_or_404(self, assignment_id: uuid.UUID) -> Assignment:
        assignment = await self.get_assignment(assignment_id)
        if not assignment:
            raise NotFound("Assignment not found")
        return assignment

    async def list_assignments(
        self,
        kit_id: Optional[uuid.UUID] = None,
        client_id: Optional[uuid.UUID] = None,
        status: Optional[AssignmentStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Assignment]:
        """List assignments, newest first."""
        query = select(Assignment)
        if kit_id:
            query = query.where(Assignment.kit_id == kit_id)
        if client_id:
            query = query.where(Assignment.client_id == client_id)
        if status:
            query = query.where(Assignment.status == status.value)

        query = query.order_by(Assignment.assigned_at.desc())
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_with_details(
        self,
        client_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """
        Assignments joined with their kit and client.

        Kits and clients can be deleted independently; the missing side is
        returned as None.
        """
        assignments = await self.list_assignments(client_id=client_id, limit=limit)
        kits = await self._load_by_id(Kit, {a.kit_id for a in assignments})
        clients = await self._load_by_id(Client, {a.client_id for a in assignments})

        return [
            {
                "assignment": a,
                "kit": kits.get(a.kit_id),
                "client": clients.get(a.client_id),
            }
            for a in assignments
        ]

    # =========================================================================
    # STATUS & DISPATCH DATES
    # =========================================================================

    async def update_status(
        self,
        assignment_id: uuid.UUID,
        status: AssignmentStatus
    ) -> Assignment:
        """
        Set the assignment status.

        No stock effect. Backward moves are allowed but logged, since stock
        accounting does not follow them.
        """
        assignment = await self.get_assignment_or_404(assignment_id)
        now = datetime.now(timezone.utc)

        if STATUS_ORDER[status.value] < STATUS_ORDER[assignment.status]:
            logger.warning(
                f"Assignment {assignment.id} moved backward: "
                f"{assignment.status} -> {status.value}"
            )

        if status == AssignmentStatus.DISPATCHED and assignment.dispatched_at is None:
            assignment.dispatched_at = now
        assignment.status = status.value
        assignment.updated_at = now

        await self.db.commit()
        await self.db.refresh(assignment)
        return assignment

    async def set_dispatch_date_for_client_month(
        self,
        client_id: uuid.UUID,
        month: str,
        dispatched_at: datetime,
        mark_dispatched: bool = False,
        grade: Optional[Union[int, str]] = None,
    ) -> int:
        """
        Stamp ``dispatched_at`` on a client's assignments made in ``month``.

        Returns the number of assignments updated; zero matches is not an
        error. No stock effect.
        """
        rows = await self._client_month_rows(client_id, month, grade)
        now = datetime.now(timezone.utc)
        for assignment in rows:
            assignment.dispatched_at = dispatched_at
            if mark_dispatched:
                assignment.status = AssignmentStatus.DISPATCHED.value
            assignment.updated_at = now

        await self.db.commit()
        logger.info(
            f"Dispatch date set on {len(rows)} assignment(s) for client {client_id}, "
            f"month {month}, grade {grade}"
        )
        return len(rows)

    async def clear_dispatch_date_for_client_month(
        self,
        client_id: uuid.UUID,
        month: str,
        grade: Optional[Union[int, str]] = None,
        mark_assigned: bool = False,
    ) -> int:
        """Inverse of set_dispatch_date_for_client_month."""
        rows = await self._client_month_rows(client_id, month, grade)
        now = datetime.now(timezone.utc)
        for assignment in rows:
            assignment.dispatched_at = None
            if mark_assigned:
                assignment.status = AssignmentStatus.ASSIGNED.value
            assignment.updated_at = now

        await self.db.commit()
        logger.info(
            f"Dispatch date cleared on {len(rows)} assignment(s) for client {client_id}, "
            f"month {month}, grade {grade}"
        )
        return len(rows)

    # =========================================================================
    # DELETE & BULK CLEAR
    # =========================================================================

    async def delete_assignment(self, assignment_id: uuid.UUID) -> int:
        """
        Delete one assignment.

        Returns the quantity given back to the kit (0 when dispatched or
        when the kit no longer exists).
        """
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .with_for_update()
        )
        assignment = result.scalar_one_or_none()
        if not assignment:
            raise NotFound("Assignment not found")

        restored = await self._delete_and_restore([assignment])
        await self.db.commit()
        return restored

    async def clear_all_pending(self) -> int:
        """Delete every assignment not yet dispatched, restoring kit stock."""
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.status != AssignmentStatus.DISPATCHED.value)
            .with_for_update()
        )
        rows = list(result.scalars().all())
        if not rows:
            return 0

        restored = await self._delete_and_restore(rows)
        await self.db.commit()
        logger.info(f"Cleared {len(rows)} pending assignment(s), restored {restored} unit(s)")
        return len(rows)

    async def clear_all(self) -> int:
        """
        Delete every assignment.

        Stock comes back only for the ones that were not dispatched.
        """
        result = await self.db.execute(select(Assignment).with_for_update())
        rows = list(result.scalars().all())
        if not rows:
            return 0

        restored = await self._delete_and_restore(rows)
        await self.db.commit()
        logger.info(f"Cleared all {len(rows)} assignment(s), restored {restored} unit(s)")
        return len(rows)

    async def clear_pending_by_kit(self, kit_id: uuid.UUID) -> Dict[str, int]:
        """Delete one kit's undispatched assignments and give the stock back."""
        result = await self.db.execute(
            select(Assignment)
            .where(
                Assignment.kit_id == kit_id,
                Assignment.status != AssignmentStatus.DISPATCHED.value,
            )
            .with_for_update()
        )
        rows = list(result.scalars().all())
        if not rows:
            return {"deleted_count": 0, "restored_qty": 0}

        restored = await self._delete_and_restore(rows)
        await self.db.commit()
        logger.info(
            f"Cleared {len(rows)} pending assignment(s) for kit {kit_id}, "
            f"restored {restored} unit(s)"
        )
        return {"deleted_count": len(rows), "restored_qty": restored}

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _delete_and_restore(self, rows: Iterable[Assignment]) -> int:
        """
        Delete ``rows`` and add back the quantity of each undispatched one to
        its kit. Does not commit. Returns the total quantity restored.
        """
        to_restore: Dict[uuid.UUID, int] = defaultdict(int)
        for assignment in rows:
            if not assignment.is_dispatched:
                to_restore[assignment.kit_id] += assignment.quantity
            await self.db.delete(assignment)

        restored = 0
        for kit_id, quantity in to_restore.items():
            kit = await self._get_kit_for_update(kit_id)
            if not kit:
                logger.warning(
                    f"Kit {kit_id} no longer exists; skipped restoring {quantity} unit(s)"
                )
                continue
            kit.set_stock(kit.stock_count + quantity)
            restored += quantity
        return restored

    async def _client_month_rows(
        self,
        client_id: uuid.UUID,
        month: str,
        grade: Optional[Union[int, str]],
    ) -> List[Assignment]:
        result = await self.db.execute(
            select(Assignment).where(Assignment.client_id == client_id)
        )
        return [
            a for a in result.scalars().all()
            if month_key(a.assigned_at) == month and matches_grade(a, grade)
        ]

    async def _get_kit_for_update(self, kit_id: uuid.UUID) -> Optional[Kit]:
        result = await self.db.execute(
            select(Kit).where(Kit.id == kit_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def _get_by_idempotency_key(self, key: str) -> Optional[Assignment]:
        result = await self.db.execute(
            select(Assignment).where(Assignment.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def _load_by_id(self, model, ids: set) -> dict:
        if not ids:
            return {}
        result = await self.db.execute(select(model).where(model.id.in_(ids)))
        return {row.id: row for row in result.scalars().all()}
