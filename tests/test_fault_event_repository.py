from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.fault_triage.fault_events.exceptions import StorageConflictException
from src.fault_triage.fault_events.models import FaultEventModel
from src.fault_triage.fault_events.repositories.fault_event import (
    FaultEventRepository,
)
from src.fault_triage.fault_events.schemas import FaultEventListParams


def _ticket():
    return FaultEventModel(source="synop", id_from_source=42, fault_type="x")


async def test_find_by_dedup_key_returns_match():
    ticket = _ticket()
    result = MagicMock()
    result.scalar_one_or_none.return_value = ticket
    db = AsyncMock()
    db.execute.return_value = result

    found = await FaultEventRepository().find_by_dedup_key(db, "synop", 42)

    assert found is ticket
    db.execute.assert_awaited_once()


async def test_add_flushes_new_ticket():
    db = AsyncMock()
    db.add = MagicMock()
    ticket = _ticket()

    saved = await FaultEventRepository().add(db, ticket)

    assert saved is ticket
    db.add.assert_called_once_with(ticket)
    db.flush.assert_awaited_once()


async def test_add_maps_unique_violation_to_storage_conflict():
    db = AsyncMock()
    db.add = MagicMock()
    db.flush.side_effect = IntegrityError(
        "INSERT",
        {},
        Exception(
            "duplicate key value violates unique constraint "
            '"uq_fault_events_source_id"'
        ),
    )

    with pytest.raises(StorageConflictException) as exc:
        await FaultEventRepository().add(db, _ticket())

    assert exc.value.source == "synop"
    assert exc.value.id_from_source == 42
    assert exc.value.error_type == "storage_conflict"


async def test_add_reraises_other_integrity_errors():
    db = AsyncMock()
    db.add = MagicMock()
    db.flush.side_effect = IntegrityError(
        "INSERT", {}, Exception("violates foreign key constraint")
    )

    with pytest.raises(IntegrityError):
        await FaultEventRepository().add(db, _ticket())


async def test_get_by_id_uses_primary_key_lookup():
    db = AsyncMock()
    db.get.return_value = None

    assert await FaultEventRepository().get_by_id(db, 5) is None
    db.get.assert_awaited_once_with(FaultEventModel, 5)


async def test_list_fault_events_returns_page_and_total():
    tickets = [_ticket(), _ticket()]
    rows = MagicMock()
    rows.scalars.return_value.all.return_value = tickets
    count = MagicMock()
    count.scalar_one.return_value = 7
    db = AsyncMock()
    db.execute.side_effect = [rows, count]

    page, total = await FaultEventRepository().list_fault_events(
        db,
        FaultEventListParams(
            source="synop", urgency_level="high", open_only=True, page=2, page_size=2
        ),
    )

    assert page == tickets
    assert total == 7
    assert db.execute.await_count == 2
