"""
Kit Service.

Kit definitions, stock edits, low-stock lookups and copying kits between
programs.
"""
import logging
import uuid
from typing import Optional, List

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.config import settings
from kitflow.core.exceptions import NotFound, ValidationError
from kitflow.models.kit import Kit, KitStatus, derive_kit_status
from kitflow.schemas.kit import KitCreate, KitUpdate, KitCopy


logger = logging.getLogger(__name__)


class KitService:
    """Service for kit records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_kit(
        self,
        data: KitCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> Kit:
        """Create a new kit. Status follows the opening stock count."""
        kit = Kit(
            name=data.name,
            type=data.type,
            category=data.category,
            variant=data.variant,
            description=data.description,
            image=data.image,
            stock_count=data.stock_count,
            low_stock_threshold=data.low_stock_threshold,
            packing_requirements=data.packing_requirements,
            pouches=self._dump_pouches(data.pouches),
            status=derive_kit_status(data.stock_count),
            remarks=data.remarks,
            serial_number=data.serial_number,
            created_by=user_id,
        )
        self.db.add(kit)
        await self.db.commit()
        await self.db.refresh(kit)
        logger.info(f"Kit created: {kit.name} ({kit.type}) stock={kit.stock_count}")
        return kit

    async def get_kit(self, kit_id: uuid.UUID) -> Optional[Kit]:
        """Get kit by ID."""
        result = await self.db.execute(select(Kit).where(Kit.id == kit_id))
        return result.scalar_one_or_none()

    async def get_kit_or_404(self, kit_id: uuid.UUID) -> Kit:
        kit = await self.get_kit(kit_id)
        if not kit:
            raise NotFound("Kit not found")
        return kit

    async def list_kits(
        self,
        kit_type: Optional[str] = None,
        status: Optional[KitStatus] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Kit]:
        """List kits with optional filters."""
        query = select(Kit)

        if kit_type:
            query = query.where(Kit.type == kit_type)
        if status:
            query = query.where(Kit.status == status.value)
        if search:
            query = query.where(
                or_(
                    Kit.name.ilike(f"%{search}%"),
                    Kit.serial_number.ilike(f"%{search}%"),
                )
            )

        query = query.order_by(Kit.created_at, Kit.name)
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_kit(self, kit_id: uuid.UUID, data: KitUpdate) -> Kit:
        """
        Patch a kit.

        Status is recomputed whenever ``stock_count`` is supplied. A negative
        stock count records a "to be made" backlog and is only accepted while
        ALLOW_NEGATIVE_KIT_STOCK is enabled.
        """
        kit = await self.get_kit_or_404(kit_id)

        update_data = data.model_dump(exclude_unset=True)
        stock_count = update_data.pop("stock_count", None)
        if stock_count is not None and stock_count < 0 and not settings.ALLOW_NEGATIVE_KIT_STOCK:
            raise ValidationError("Stock count cannot be negative")
        if "pouches" in update_data:
            update_data["pouches"] = self._dump_pouches(data.pouches)

        for field, value in update_data.items():
            setattr(kit, field, value)

        if stock_count is not None:
            if stock_count != kit.stock_count:
                logger.info(
                    f"Kit {kit.id} stock edited: {kit.stock_count} -> {stock_count}"
                )
            kit.set_stock(stock_count)

        await self.db.commit()
        await self.db.refresh(kit)
        return kit

    async def delete_kit(self, kit_id: uuid.UUID) -> None:
        """Delete a kit. Assignments that reference it are left in place."""
        kit = await self.get_kit_or_404(kit_id)
        await self.db.delete(kit)
        await self.db.commit()
        logger.info(f"Kit deleted: {kit_id}")

    async def get_low_stock_kits(self) -> List[Kit]:
        """Kits at or below their low-stock threshold."""
        result = await self.db.execute(
            select(Kit)
            .where(Kit.stock_count <= Kit.low_stock_threshold)
            .order_by(Kit.stock_count)
        )
        return list(result.scalars().all())

    async def copy_kit(
        self,
        kit_id: uuid.UUID,
        data: KitCopy,
        user_id: Optional[uuid.UUID] = None
    ) -> Kit:
        """Copy a kit's packing data into a new, empty kit under another program."""
        original = await self.get_kit_or_404(kit_id)

        copy = Kit(
            name=data.new_name or f"{original.name} (Copy)",
            type=data.new_type,
            category=original.category,
            # Variants are program specific
            variant=original.variant if data.new_type == original.type else None,
            description=original.description,
            image=original.image,
            low_stock_threshold=original.low_stock_threshold,
            packing_requirements=original.packing_requirements,
            pouches=list(original.pouches) if original.pouches is not None else None,
            created_by=user_id,
        )
        copy.set_stock(0)
        self.db.add(copy)
        await self.db.commit()
        await self.db.refresh(copy)
        logger.info(f"Kit {original.id} copied to {copy.id} under '{copy.type}'")
        return copy

    @staticmethod
    def _dump_pouches(pouches) -> Optional[list]:
        if pouches is None:
            return None
        return [pouch.model_dump() for pouch in pouches]
