import uuid

import pytest

from kitflow.core.exceptions import NotFound, ValidationError
from kitflow.models.inventory import InventoryCategoryType, SubcategoryType
from kitflow.schemas.inventory import (
    InventoryItemCreate, InventoryItemUpdate, InventoryCategoryCreate
)
from kitflow.services.inventory_service import InventoryService


@pytest.fixture
async def plywood(db):
    return await InventoryService(db).create_item(InventoryItemCreate(
        name="Plywood 3mm",
        category=InventoryCategoryType.RAW_MATERIAL,
        sub_category="wood",
        unit="sheet",
        quantity=20,
    ))


async def test_adjust_stock(db, plywood):
    service = InventoryService(db)

    item = await service.adjust_stock(plywood.id, -5)
    assert item.quantity == 15

    item = await service.adjust_stock(plywood.id, 10)
    assert item.quantity == 25


async def test_adjust_stock_to_exactly_zero(db, plywood):
    item = await InventoryService(db).adjust_stock(plywood.id, -20)
    assert item.quantity == 0


async def test_adjust_stock_below_zero_rejected(db, plywood):
    service = InventoryService(db)

    with pytest.raises(ValidationError, match="cannot be negative"):
        await service.adjust_stock(plywood.id, -21)

    await db.refresh(plywood)
    assert plywood.quantity == 20


async def test_adjust_unknown_item(db):
    with pytest.raises(NotFound):
        await InventoryService(db).adjust_stock(uuid.uuid4(), 1)


async def test_list_items_by_category(db, plywood):
    service = InventoryService(db)
    await service.create_item(InventoryItemCreate(
        name="Acrylic 2mm",
        category=InventoryCategoryType.RAW_MATERIAL,
        sub_category="plastic",
    ))
    await service.create_item(InventoryItemCreate(
        name="Cut chassis",
        category=InventoryCategoryType.PRE_PROCESSED,
    ))

    raw = await service.list_items(InventoryCategoryType.RAW_MATERIAL)
    wood = await service.list_items(InventoryCategoryType.RAW_MATERIAL, "wood")
    pre = await service.list_items(InventoryCategoryType.PRE_PROCESSED)

    assert [i.name for i in raw] == ["Acrylic 2mm", "Plywood 3mm"]
    assert [i.name for i in wood] == ["Plywood 3mm"]
    assert [i.name for i in pre] == ["Cut chassis"]


async def test_update_item_leaves_quantity(db, plywood):
    item = await InventoryService(db).update_item(
        plywood.id, InventoryItemUpdate(notes="Birch only", unit="sheets")
    )

    assert item.notes == "Birch only"
    assert item.unit == "sheets"
    assert item.quantity == 20


async def test_category_values_are_unique(db):
    service = InventoryService(db)
    await service.create_category(InventoryCategoryCreate(
        name="Wood", value="wood", category_type=SubcategoryType.RAW_MATERIAL
    ))

    with pytest.raises(ValidationError, match="already exists"):
        await service.create_category(InventoryCategoryCreate(
            name="Timber", value="wood", category_type=SubcategoryType.PRE_PROCESSED
        ))


async def test_list_and_delete_categories(db):
    service = InventoryService(db)
    wood = await service.create_category(InventoryCategoryCreate(
        name="Wood", value="wood", category_type=SubcategoryType.RAW_MATERIAL
    ))
    await service.create_category(InventoryCategoryCreate(
        name="Laser cut", value="laser-cut", category_type=SubcategoryType.PRE_PROCESSED
    ))

    raw = await service.list_categories(SubcategoryType.RAW_MATERIAL)
    assert [c.value for c in raw] == ["wood"]

    await service.delete_category(wood.id)
    assert [c.value for c in await service.list_categories()] == ["laser-cut"]
