"""
Inventory API Endpoints.

Items are adjusted by signed deltas; there is no endpoint that writes an
absolute quantity after creation.
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from kitflow.api.deps import DB, CurrentUser, AdminUser
from kitflow.models.inventory import InventoryCategoryType, SubcategoryType
from kitflow.schemas.base import DeleteResponse
from kitflow.schemas.inventory import (
    InventoryItemCreate, InventoryItemUpdate, InventoryItemResponse,
    StockAdjustment, StockAdjustmentResult,
    InventoryCategoryCreate, InventoryCategoryResponse,
)
from kitflow.services.inventory_service import InventoryService

router = APIRouter()


# ==================== Categories ====================
# Declared before the item routes so "/categories" is not read as an item id

@router.get("/categories", response_model=List[InventoryCategoryResponse])
async def list_categories(
    db: DB,
    current_user: CurrentUser,
    category_type: Optional[SubcategoryType] = None,
):
    return await InventoryService(db).list_categories(category_type)


@router.post(
    "/categories",
    response_model=InventoryCategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(data: InventoryCategoryCreate, db: DB, current_user: CurrentUser):
    """Create a custom subcategory. Values are unique."""
    return await InventoryService(db).create_category(data, current_user.id)


@router.delete("/categories/{category_id}", response_model=DeleteResponse)
async def delete_category(category_id: UUID, db: DB, admin: AdminUser):
    await InventoryService(db).delete_category(category_id)
    return DeleteResponse(id=category_id)


# ==================== Items ====================

@router.get("", response_model=List[InventoryItemResponse])
async def list_items(
    db: DB,
    current_user: CurrentUser,
    category: Optional[InventoryCategoryType] = None,
    sub_category: Optional[str] = None,
):
    return await InventoryService(db).list_items(category, sub_category)


@router.post("", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(data: InventoryItemCreate, db: DB, current_user: CurrentUser):
    return await InventoryService(db).create_item(data, current_user.id)


@router.patch("/{item_id}", response_model=InventoryItemResponse)
async def update_item(
    item_id: UUID,
    data: InventoryItemUpdate,
    db: DB,
    current_user: CurrentUser,
):
    """Edit name, unit, notes or subcategory."""
    return await InventoryService(db).update_item(item_id, data)


@router.post("/{item_id}/adjust", response_model=StockAdjustmentResult)
async def adjust_stock(
    item_id: UUID,
    data: StockAdjustment,
    db: DB,
    current_user: CurrentUser,
):
    """Add or remove quantity. Fails with 422 if the result would be negative."""
    item = await InventoryService(db).adjust_stock(item_id, data.delta)
    return StockAdjustmentResult(id=item.id, quantity=item.quantity)


@router.delete("/{item_id}", response_model=DeleteResponse)
async def delete_item(item_id: UUID, db: DB, admin: AdminUser):
    await InventoryService(db).delete_item(item_id)
    return DeleteResponse(id=item_id)
