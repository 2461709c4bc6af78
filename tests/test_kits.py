"""Kit store: status derivation, negative stock, low stock and copying."""
import uuid

import pytest
from pydantic import ValidationError as SchemaError

from kitflow.config import settings
from kitflow.core.exceptions import NotFound, ValidationError
from kitflow.models.kit import KitStatus, derive_kit_status
from kitflow.schemas.kit import KitCreate, KitUpdate, KitCopy, Pouch, Material
from kitflow.services.kit_service import KitService


def test_derive_kit_status():
    assert derive_kit_status(0) == KitStatus.ASSIGNED.value
    assert derive_kit_status(1) == KitStatus.IN_STOCK.value
    assert derive_kit_status(250) == KitStatus.IN_STOCK.value
    # Backlog is not "assigned"; only exactly zero is
    assert derive_kit_status(-3) == KitStatus.IN_STOCK.value


async def test_create_kit_derives_status(db):
    service = KitService(db)

    stocked = await service.create_kit(KitCreate(name="Rover", type="robotics", stock_count=5))
    empty = await service.create_kit(KitCreate(name="Arm", type="robotics", stock_count=0))

    assert stocked.status == KitStatus.IN_STOCK.value
    assert empty.status == KitStatus.ASSIGNED.value


def test_create_rejects_negative_stock():
    with pytest.raises(SchemaError):
        KitCreate(name="Rover", type="robotics", stock_count=-1)


def test_material_quantity_must_be_positive():
    with pytest.raises(SchemaError):
        Material(name="Wheel", quantity=0)


async def test_structured_kit(db):
    kit = await KitService(db).create_kit(KitCreate(
        name="Solar Car",
        type="cstem",
        stock_count=3,
        pouches=[
            Pouch(name="Pouch A", materials=[
                Material(name="Solar panel", quantity=1),
                Material(name="Wheel", quantity=4),
            ]),
            Pouch(name="Pouch B", materials=[Material(name="Motor", quantity=1, unit="pcs")]),
        ],
    ))

    assert kit.is_structured
    assert kit.material_names() == ["Solar panel", "Wheel", "Motor"]


async def test_unstructured_kit_material_names(db):
    kit = await KitService(db).create_kit(KitCreate(
        name="Volcano",
        type="cstem",
        packing_requirements="Baking soda, Vinegar ,  , Food colour",
    ))

    assert not kit.is_structured
    assert kit.material_names() == ["Baking soda", "Vinegar", "Food colour"]


async def test_update_stock_recomputes_status(db, make_kit):
    kit = await make_kit(stock_count=4)
    service = KitService(db)

    kit = await service.update_kit(kit.id, KitUpdate(stock_count=0))
    assert kit.status == KitStatus.ASSIGNED.value

    kit = await service.update_kit(kit.id, KitUpdate(stock_count=7))
    assert kit.status == KitStatus.IN_STOCK.value
    assert kit.stock_count == 7


async def test_update_without_stock_keeps_status(db, make_kit):
    kit = await make_kit(stock_count=0)

    kit = await KitService(db).update_kit(kit.id, KitUpdate(remarks="Waiting on motors"))

    assert kit.status == KitStatus.ASSIGNED.value
    assert kit.remarks == "Waiting on motors"


async def test_negative_stock_records_backlog(db, make_kit):
    kit = await make_kit(stock_count=2)

    kit = await KitService(db).update_kit(kit.id, KitUpdate(stock_count=-5))

    assert kit.stock_count == -5
    assert kit.units_to_make == 5
    assert kit.status == KitStatus.IN_STOCK.value


async def test_negative_stock_rejected_when_disabled(db, make_kit, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_NEGATIVE_KIT_STOCK", False)
    kit = await make_kit(stock_count=2)

    with pytest.raises(ValidationError):
        await KitService(db).update_kit(kit.id, KitUpdate(stock_count=-1))


async def test_update_missing_kit(db):
    with pytest.raises(NotFound):
        await KitService(db).update_kit(uuid.uuid4(), KitUpdate(name="Ghost"))


async def test_low_stock_kits(db, make_kit):
    await make_kit(name="Plenty", stock_count=50, low_stock_threshold=5)
    at_threshold = await make_kit(name="Edge", stock_count=5, low_stock_threshold=5)
    empty = await make_kit(name="Empty", stock_count=0, low_stock_threshold=0)

    low = await KitService(db).get_low_stock_kits()

    assert {k.id for k in low} == {at_threshold.id, empty.id}
    assert all(k.is_low_stock for k in low)


async def test_list_kits_filters(db, make_kit):
    await make_kit(name="Solar Car", type="cstem", stock_count=3)
    await make_kit(name="Line Follower", type="robotics", stock_count=0)

    service = KitService(db)
    robotics = await service.list_kits(kit_type="robotics")
    assigned = await service.list_kits(status=KitStatus.ASSIGNED)
    searched = await service.list_kits(search="solar")

    assert [k.name for k in robotics] == ["Line Follower"]
    assert [k.name for k in assigned] == ["Line Follower"]
    assert [k.name for k in searched] == ["Solar Car"]


async def test_copy_kit_to_other_program(db, make_kit):
    original = await make_kit(
        name="Solar Car",
        type="cstem",
        stock_count=12,
        variant="v2",
        low_stock_threshold=3,
        description="Build a solar car",
        pouches=[{"name": "Main", "materials": [{"name": "Panel", "quantity": 1, "unit": "pcs"}]}],
    )

    copy = await KitService(db).copy_kit(original.id, KitCopy(new_type="robotics"))

    assert copy.id != original.id
    assert copy.name == "Solar Car (Copy)"
    assert copy.type == "robotics"
    assert copy.stock_count == 0
    assert copy.status == KitStatus.ASSIGNED.value
    assert copy.variant is None
    assert copy.low_stock_threshold == 3
    assert copy.description == "Build a solar car"
    assert copy.pouches == original.pouches


async def test_copy_kit_same_program_keeps_variant(db, make_kit):
    original = await make_kit(name="Solar Car", type="cstem", variant="v2")

    copy = await KitService(db).copy_kit(
        original.id,
        KitCopy(new_type="cstem", new_name="Solar Car Junior"),
    )

    assert copy.name == "Solar Car Junior"
    assert copy.variant == "v2"


def test_update_rejects_null_for_required_fields():
    with pytest.raises(SchemaError, match="cannot be null"):
        KitUpdate(name=None)
    with pytest.raises(SchemaError):
        KitUpdate(low_stock_threshold=None)

    update = KitUpdate(remarks=None, variant=None)
    assert update.model_dump(exclude_unset=True) == {"remarks": None, "variant": None}
