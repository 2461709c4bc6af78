"""
Assignment lifecycle: stock reservation, status moves, dispatch dates and
the clears that give stock back.
"""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import select, func

from kitflow.core.dates import as_utc
from kitflow.core.exceptions import InsufficientStock, NotFound
from kitflow.models.assignment import Assignment, AssignmentStatus
from kitflow.models.kit import KitStatus
from kitflow.schemas.assignment import AssignmentCreate
from kitflow.services.assignment_service import AssignmentService, matches_grade


async def assign(db, kit, client, quantity, **kwargs) -> Assignment:
    return await AssignmentService(db).create_assignment(
        AssignmentCreate(kit_id=kit.id, client_id=client.id, quantity=quantity, **kwargs)
    )


async def count_assignments(db) -> int:
    return await db.scalar(select(func.count(Assignment.id)))


async def set_assigned_at(db, assignment, when: datetime) -> None:
    assignment.assigned_at = when
    await db.commit()


# =============================================================================
# Create
# =============================================================================

async def test_create_decrements_stock(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()

    assignment = await assign(db, kit, client, 4, notes="Term 1", grade=5)

    assert assignment.status == AssignmentStatus.ASSIGNED.value
    assert assignment.quantity == 4
    assert assignment.grade == 5
    assert assignment.assigned_at is not None
    assert kit.stock_count == 6
    assert kit.status == KitStatus.IN_STOCK.value


async def test_create_taking_last_units_marks_kit_assigned(db, make_kit, make_client):
    kit = await make_kit(stock_count=3)
    client = await make_client()

    await assign(db, kit, client, 3)

    assert kit.stock_count == 0
    assert kit.status == KitStatus.ASSIGNED.value


async def test_insufficient_stock_changes_nothing(db, make_kit, make_client):
    kit = await make_kit(stock_count=2)
    client = await make_client()

    with pytest.raises(InsufficientStock):
        await assign(db, kit, client, 3)

    await db.refresh(kit)
    assert kit.stock_count == 2
    assert kit.status == KitStatus.IN_STOCK.value
    assert await count_assignments(db) == 0


async def test_missing_kit_is_insufficient_stock(db, make_client):
    client = await make_client()

    with pytest.raises(InsufficientStock):
        await AssignmentService(db).create_assignment(
            AssignmentCreate(kit_id=uuid.uuid4(), client_id=client.id, quantity=1)
        )

    assert await count_assignments(db) == 0


async def test_backlog_kit_cannot_be_assigned(db, make_kit, make_client):
    kit = await make_kit(stock_count=-4)
    client = await make_client()

    with pytest.raises(InsufficientStock):
        await assign(db, kit, client, 1)


async def test_create_with_idempotency_key_is_applied_once(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()

    first = await assign(db, kit, client, 3, idempotency_key="req-001")
    retry = await assign(db, kit, client, 3, idempotency_key="req-001")

    assert retry.id == first.id
    assert kit.stock_count == 7
    assert await count_assignments(db) == 1


async def test_distinct_idempotency_keys_create_separate_assignments(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()

    await assign(db, kit, client, 3, idempotency_key="req-001")
    await assign(db, kit, client, 3, idempotency_key="req-002")

    assert kit.stock_count == 4
    assert await count_assignments(db) == 2


# =============================================================================
# Status
# =============================================================================

async def test_status_moves_do_not_touch_stock(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    assignment = await assign(db, kit, client, 4)
    service = AssignmentService(db)

    packed = await service.update_status(assignment.id, AssignmentStatus.PACKED)
    assert packed.status == AssignmentStatus.PACKED.value
    assert packed.updated_at is not None
    assert packed.dispatched_at is None

    dispatched = await service.update_status(assignment.id, AssignmentStatus.DISPATCHED)
    assert dispatched.status == AssignmentStatus.DISPATCHED.value
    assert dispatched.dispatched_at is not None

    await db.refresh(kit)
    assert kit.stock_count == 6


async def test_dispatch_keeps_recorded_dispatch_date(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    planned = datetime(2024, 3, 20, 9, 0, tzinfo=timezone.utc)
    assignment = await assign(db, kit, client, 1, dispatched_at=planned)

    dispatched = await AssignmentService(db).update_status(
        assignment.id, AssignmentStatus.DISPATCHED
    )

    assert as_utc(dispatched.dispatched_at) == planned


async def test_backward_status_move_is_allowed_and_logged(db, make_kit, make_client, caplog):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    assignment = await assign(db, kit, client, 2)
    service = AssignmentService(db)
    await service.update_status(assignment.id, AssignmentStatus.PACKED)

    with caplog.at_level("WARNING", logger="kitflow.services.assignment_service"):
        moved = await service.update_status(assignment.id, AssignmentStatus.ASSIGNED)

    assert moved.status == AssignmentStatus.ASSIGNED.value
    assert "moved backward" in caplog.text


async def test_update_status_unknown_assignment(db):
    with pytest.raises(NotFound):
        await AssignmentService(db).update_status(uuid.uuid4(), AssignmentStatus.PACKED)


# =============================================================================
# Delete and clears
# =============================================================================

async def test_create_then_clear_pending_restores_stock(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    await assign(db, kit, client, 3)
    assert kit.stock_count == 7

    deleted = await AssignmentService(db).clear_all_pending()

    assert deleted == 1
    assert kit.stock_count == 10
    assert kit.status == KitStatus.IN_STOCK.value
    assert await count_assignments(db) == 0


async def test_clear_pending_on_empty_store(db):
    assert await AssignmentService(db).clear_all_pending() == 0


async def test_clear_pending_restores_each_assignment_once(db, make_kit, make_client):
    solar = await make_kit(name="Solar Car", stock_count=10)
    rover = await make_kit(name="Rover", type="robotics", stock_count=5)
    school = await make_client()
    college = await make_client(name="Hill College")

    await assign(db, solar, school, 2)
    await assign(db, solar, college, 3)
    packed = await assign(db, rover, school, 5)
    await AssignmentService(db).update_status(packed.id, AssignmentStatus.PACKED)
    assert rover.status == KitStatus.ASSIGNED.value

    deleted = await AssignmentService(db).clear_all_pending()

    assert deleted == 3
    assert solar.stock_count == 10
    assert rover.stock_count == 5
    assert rover.status == KitStatus.IN_STOCK.value


async def test_clear_pending_leaves_dispatched(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    service = AssignmentService(db)
    pending = await assign(db, kit, client, 2)
    shipped = await assign(db, kit, client, 3)
    await service.update_status(shipped.id, AssignmentStatus.DISPATCHED)

    deleted = await service.clear_all_pending()

    assert deleted == 1
    assert kit.stock_count == 7
    assert await service.get_assignment(pending.id) is None
    assert await service.get_assignment(shipped.id) is not None


async def test_clear_all_never_restores_dispatched(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    service = AssignmentService(db)
    await assign(db, kit, client, 2)
    shipped = await assign(db, kit, client, 3)
    await service.update_status(shipped.id, AssignmentStatus.DISPATCHED)
    assert kit.stock_count == 5

    deleted = await service.clear_all()

    assert deleted == 2
    assert kit.stock_count == 7
    assert await count_assignments(db) == 0


async def test_clear_pending_by_kit(db, make_kit, make_client):
    solar = await make_kit(name="Solar Car", stock_count=10)
    rover = await make_kit(name="Rover", type="robotics", stock_count=10)
    client = await make_client()
    service = AssignmentService(db)
    await assign(db, solar, client, 2)
    await assign(db, solar, client, 4)
    shipped = await assign(db, solar, client, 1)
    await service.update_status(shipped.id, AssignmentStatus.DISPATCHED)
    await assign(db, rover, client, 5)

    result = await service.clear_pending_by_kit(solar.id)

    assert result == {"deleted_count": 2, "restored_qty": 6}
    assert solar.stock_count == 9
    assert rover.stock_count == 5
    assert await count_assignments(db) == 2


async def test_clear_pending_by_kit_with_nothing_pending(db, make_kit):
    kit = await make_kit()

    result = await AssignmentService(db).clear_pending_by_kit(kit.id)

    assert result == {"deleted_count": 0, "restored_qty": 0}


async def test_clear_skips_deleted_kit(db, make_kit, make_client, caplog):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    await assign(db, kit, client, 3)
    kit_id = kit.id
    await db.delete(kit)
    await db.commit()

    with caplog.at_level("WARNING", logger="kitflow.services.assignment_service"):
        result = await AssignmentService(db).clear_pending_by_kit(kit_id)

    assert result == {"deleted_count": 1, "restored_qty": 0}
    assert "no longer exists" in caplog.text


async def test_delete_single_assignment(db, make_kit, make_client):
    kit = await make_kit(stock_count=10)
    client = await make_client()
    service = AssignmentService(db)
    pending = await assign(db, kit, client, 4)
    shipped = await assign(db, kit, client, 1)
    await service.update_status(shipped.id, AssignmentStatus.DISPATCHED)

    assert await service.delete_assignment(pending.id) == 4
    assert await service.delete_assignment(shipped.id) == 0
    assert kit.stock_count == 9

    with pytest.raises(NotFound):
        await service.delete_assignment(pending.id)


# =============================================================================
# Dispatch dates by client month
# =============================================================================

@pytest.fixture
async def march_april(db, make_kit, make_client):
    """March assignments with grades 1, 3 and none, plus an ungraded April one."""
    kit = await make_kit(stock_count=100)
    client = await make_client()
    march = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    april = datetime(2024, 4, 2, 12, 0, tzinfo=timezone.utc)

    rows = {
        "march_g1": await assign(db, kit, client, 1, grade=1),
        "march_g3": await assign(db, kit, client, 2, grade=3),
        "march_none": await assign(db, kit, client, 3),
        "april_none": await assign(db, kit, client, 4),
    }
    for key, row in rows.items():
        await set_assigned_at(db, row, april if key.startswith("april") else march)
    return client, rows


async def test_set_dispatch_date_unspecified_grade_only(db, march_april):
    client, rows = march_april
    when = datetime(2024, 3, 25, 10, 0, tzinfo=timezone.utc)

    updated = await AssignmentService(db).set_dispatch_date_for_client_month(
        client.id, "2024-03", when, grade="unspecified"
    )

    assert updated == 1
    assert as_utc(rows["march_none"].dispatched_at) == when
    assert rows["march_g1"].dispatched_at is None
    assert rows["march_g3"].dispatched_at is None
    assert rows["april_none"].dispatched_at is None


async def test_set_dispatch_date_by_grade(db, march_april):
    client, rows = march_april
    when = datetime(2024, 3, 25, tzinfo=timezone.utc)

    updated = await AssignmentService(db).set_dispatch_date_for_client_month(
        client.id, "2024-03", when, mark_dispatched=True, grade=3
    )

    assert updated == 1
    assert rows["march_g3"].status == AssignmentStatus.DISPATCHED.value
    assert rows["march_g1"].status == AssignmentStatus.ASSIGNED.value


async def test_set_dispatch_date_whole_month(db, march_april):
    client, rows = march_april
    when = datetime(2024, 3, 25, tzinfo=timezone.utc)

    updated = await AssignmentService(db).set_dispatch_date_for_client_month(
        client.id, "2024-03", when
    )

    assert updated == 3
    assert rows["april_none"].dispatched_at is None


async def test_set_dispatch_date_no_match(db, march_april):
    client, _ = march_april

    updated = await AssignmentService(db).set_dispatch_date_for_client_month(
        client.id, "2023-12", datetime(2023, 12, 1, tzinfo=timezone.utc)
    )

    assert updated == 0


async def test_clear_dispatch_date(db, march_april):
    client, rows = march_april
    service = AssignmentService(db)
    when = datetime(2024, 3, 25, tzinfo=timezone.utc)
    await service.set_dispatch_date_for_client_month(
        client.id, "2024-03", when, mark_dispatched=True
    )

    cleared = await service.clear_dispatch_date_for_client_month(
        client.id, "2024-03", grade=1, mark_assigned=True
    )

    assert cleared == 1
    assert rows["march_g1"].dispatched_at is None
    assert rows["march_g1"].status == AssignmentStatus.ASSIGNED.value
    assert rows["march_g3"].dispatched_at is not None
    assert rows["march_g3"].status == AssignmentStatus.DISPATCHED.value


def test_matches_grade():
    graded = Assignment(grade=4)
    ungraded = Assignment(grade=None)

    assert matches_grade(graded, None)
    assert matches_grade(ungraded, None)
    assert matches_grade(graded, 4)
    assert not matches_grade(graded, 5)
    assert matches_grade(ungraded, "unspecified")
    assert not matches_grade(graded, "unspecified")


# =============================================================================
# Reads
# =============================================================================

async def test_list_with_details_tolerates_orphans(db, make_kit, make_client):
    kit = await make_kit()
    client = await make_client()
    await assign(db, kit, client, 1)
    await db.delete(client)
    await db.commit()

    rows = await AssignmentService(db).list_with_details()

    assert len(rows) == 1
    assert rows[0]["kit"].id == kit.id
    assert rows[0]["client"] is None
