from datetime import UTC, datetime

import pytest

from src.fault_triage.fault_events.exceptions import (
    FaultValidationException,
    InvalidReferenceException,
)
from src.fault_triage.fault_events.normalizer import EventNormalizer, parse_payload
from src.fault_triage.fault_events.taxonomy import UrgencyLevel
from tests.mocks.fault_event_mocks import (
    DOWNTOWN_ASSET,
    FAST_RESPONSE_CUSTOMER,
    MALL_ASSET,
    fault_payload,
)


@pytest.fixture
def normalizer(reference_repo):
    return EventNormalizer(reference_repo)


async def test_normalize_success(normalizer, db_session):
    normalized = await normalizer.normalize(db_session, fault_payload())

    assert normalized.customer == FAST_RESPONSE_CUSTOMER
    assert normalized.asset == DOWNTOWN_ASSET
    assert normalized.event.fault_time == datetime(2025, 6, 4, 15, 30, 12, tzinfo=UTC)
    assert normalized.event.dedup_key == ("chargepoint", 19824590)


def test_naive_timestamps_are_utc():
    event = parse_payload(fault_payload(fault_time="2025-06-04T15:30:12"))

    assert event.fault_time.tzinfo == UTC


def test_offset_timestamps_are_converted_to_utc():
    event = parse_payload(
        fault_payload(
            fault_time="2025-06-04T17:30:12+02:00",
            resolved_at="2025-06-04T18:00:00+02:00",
        )
    )

    assert event.fault_time == datetime(2025, 6, 4, 15, 30, 12, tzinfo=UTC)
    assert event.resolved_at == datetime(2025, 6, 4, 16, 0, tzinfo=UTC)


def test_optional_fields_default():
    payload = fault_payload()
    for field in ("id_from_source", "connector_id", "resolved_at", "downtime_type"):
        payload.pop(field)
    payload.pop("is_alarm")

    event = parse_payload(payload)

    assert event.id_from_source is None
    assert event.dedup_key is None
    assert event.connector_id is None
    assert event.is_alarm is False


def test_null_is_alarm_is_false():
    assert parse_payload(fault_payload(is_alarm=None)).is_alarm is False


def test_blank_urgency_override_is_ignored():
    assert parse_payload(fault_payload(urgency_level="")).urgency_level is None
    assert (
        parse_payload(fault_payload(urgency_level="critical")).urgency_level
        == UrgencyLevel.CRITICAL
    )


def test_unknown_fields_are_ignored():
    event = parse_payload(fault_payload(vendor_blob={"x": 1}))

    assert not hasattr(event, "vendor_blob")


@pytest.mark.parametrize(
    "field",
    ["fault_time", "status", "fault_type", "source", "customer_id", "location_asset_id"],
)
def test_missing_required_field_is_named(field):
    payload = fault_payload()
    payload.pop(field)

    with pytest.raises(FaultValidationException) as exc:
        parse_payload(payload)

    assert exc.value.field == field
    assert field in exc.value.message
    assert exc.value.error_type == "validation_error"


def test_unparsable_fault_time_is_named():
    with pytest.raises(FaultValidationException) as exc:
        parse_payload(fault_payload(fault_time="yesterday afternoon"))

    assert exc.value.field == "fault_time"


@pytest.mark.parametrize(
    "field, value",
    [
        ("id_from_source", 2**40),
        ("customer_id", 2**31),
        ("location_asset_id", 2**40),
        ("connector_id", 2**31),
        ("customer_id", 0),
        ("id_from_source", -1),
    ],
)
def test_out_of_range_id_is_named(field, value):
    with pytest.raises(FaultValidationException) as exc:
        parse_payload(fault_payload(**{field: value}))

    assert exc.value.field == field
    assert exc.value.error_type == "validation_error"


def test_largest_storable_id_is_accepted():
    event = parse_payload(fault_payload(id_from_source=2**31 - 1))

    assert event.id_from_source == 2**31 - 1


def test_blank_status_is_rejected():
    with pytest.raises(FaultValidationException) as exc:
        parse_payload(fault_payload(status=""))

    assert exc.value.field == "status"


@pytest.mark.parametrize("payload", [None, [], "not an object", 42])
def test_non_mapping_payload_is_rejected(payload):
    with pytest.raises(FaultValidationException) as exc:
        parse_payload(payload)

    assert exc.value.field == "payload"


async def test_unknown_customer(normalizer, db_session):
    with pytest.raises(InvalidReferenceException) as exc:
        await normalizer.normalize(db_session, fault_payload(customer_id=999))

    assert exc.value.message.startswith("Invalid customer")
    assert "999" in exc.value.message


async def test_unknown_asset(normalizer, db_session):
    with pytest.raises(InvalidReferenceException) as exc:
        await normalizer.normalize(db_session, fault_payload(location_asset_id=555))

    assert exc.value.message.startswith("Invalid location asset")


async def test_asset_owned_by_another_customer(normalizer, db_session):
    with pytest.raises(InvalidReferenceException) as exc:
        await normalizer.normalize(
            db_session, fault_payload(location_asset_id=MALL_ASSET.id)
        )

    assert exc.value.error_type == "invalid_reference"
    assert str(MALL_ASSET.customer_id) in exc.value.message
