"""
Inventory Service.

Raw materials, pre-processed parts and finished goods, plus the custom
subcategories used to group raw and pre-processed items. Item quantities move
only through signed adjustments and may never go below zero.
"""
import logging
import uuid
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.exceptions import NotFound, ValidationError
from kitflow.models.inventory import (
    InventoryItem, InventoryCategory, InventoryCategoryType, SubcategoryType
)
from kitflow.schemas.inventory import (
    InventoryItemCreate, InventoryItemUpdate, InventoryCategoryCreate
)


logger = logging.getLogger(__name__)


class InventoryService:
    """Service for inventory items and their custom categories."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Items ====================

    async def list_items(
        self,
        category: Optional[InventoryCategoryType] = None,
        sub_category: Optional[str] = None,
    ) -> List[InventoryItem]:
        query = select(InventoryItem)
        if category:
            query = query.where(InventoryItem.category == category.value)
        if sub_category:
            query = query.where(InventoryItem.sub_category == sub_category)
        result = await self.db.execute(query.order_by(InventoryItem.name))
        return list(result.scalars().all())

    async def get_item_or_404(self, item_id: uuid.UUID) -> InventoryItem:
        result = await self.db.execute(
            select(InventoryItem).where(InventoryItem.id == item_id)
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFound("Inventory item not found")
        return item

    async def create_item(
        self,
        data: InventoryItemCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> InventoryItem:
        item = InventoryItem(
            name=data.name,
            category=data.category.value,
            sub_category=data.sub_category,
            unit=data.unit,
            quantity=data.quantity,
            notes=data.notes,
            created_by=user_id,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"Inventory item created: {item.name} ({item.category}) qty={item.quantity}")
        return item

    async def update_item(
        self,
        item_id: uuid.UUID,
        data: InventoryItemUpdate
    ) -> InventoryItem:
        item = await self.get_item_or_404(item_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def adjust_stock(self, item_id: uuid.UUID, delta: int) -> InventoryItem:
        """Apply a signed quantity change. The result may not be negative."""
        result = await self.db.execute(
            select(InventoryItem)
            .where(InventoryItem.id == item_id)
            .with_for_update()
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFound("Inventory item not found")

        new_quantity = item.quantity + delta
        if new_quantity < 0:
            raise ValidationError("Resulting quantity cannot be negative")

        item.quantity = new_quantity
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"Inventory item {item.id} adjusted by {delta:+d} -> {item.quantity}")
        return item

    async def delete_item(self, item_id: uuid.UUID) -> None:
        item = await self.get_item_or_404(item_id)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"Inventory item deleted: {item_id}")

    # ==================== Categories ====================

    async def list_categories(
        self,
        category_type: Optional[SubcategoryType] = None
    ) -> List[InventoryCategory]:
        query = select(InventoryCategory)
        if category_type:
            query = query.where(InventoryCategory.category_type == category_type.value)
        result = await self.db.execute(query.order_by(InventoryCategory.name))
        return list(result.scalars().all())

    async def create_category(
        self,
        data: InventoryCategoryCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> InventoryCategory:
        existing = await self.db.execute(
            select(InventoryCategory).where(InventoryCategory.value == data.value)
        )
        if existing.scalar_one_or_none():
            raise ValidationError("Category value already exists")

        category = InventoryCategory(
            name=data.name,
            value=data.value,
            category_type=data.category_type.value,
            created_by=user_id,
        )
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def delete_category(self, category_id: uuid.UUID) -> None:
        result = await self.db.execute(
            select(InventoryCategory).where(InventoryCategory.id == category_id)
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFound("Category not found")
        await self.db.delete(category)
        await self.db.commit()
