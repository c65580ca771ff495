from http import HTTPStatus
from unittest.mock import AsyncMock, patch

from src.fault_triage.scripts import sample_fault
from src.fault_triage.scripts.sample_fault import sample_fault_event, send_sample_fault


def test_sample_event_uses_seeded_customer_and_asset():
    event = sample_fault_event()

    assert event["customer_id"] == 107
    assert event["location_asset_id"] == 12920
    assert event["fault_type"] == "Ground Fault Circuit Interrupter"
    assert event["source"] == "chargepoint"
    assert event["is_alarm"] is True
    assert event["resolved_at"] is None


@patch("aiohttp.ClientSession.post")
async def test_send_sample_fault_posts_event_with_api_key(mock_post):
    mock_response = AsyncMock()
    mock_response.status = HTTPStatus.CREATED
    mock_response.json.return_value = {"success": True, "urgency": "critical"}
    mock_post.return_value.__aenter__.return_value = mock_response

    status, body = await send_sample_fault("http://triage.local:8000/")

    assert status == HTTPStatus.CREATED
    assert body["urgency"] == "critical"
    args, kwargs = mock_post.call_args
    assert args[0] == "http://triage.local:8000/api/v1/fault_events"
    assert kwargs["json"] == sample_fault_event()
    settings = sample_fault.settings
    assert kwargs["headers"] == {
        settings.FASTAPI_API_KEY_HEADER: settings.FASTAPI_API_KEY
    }


@patch("aiohttp.ClientSession.post")
async def test_send_sample_fault_hints_at_seed_when_reference_missing(
    mock_post, caplog
):
    mock_response = AsyncMock()
    mock_response.status = HTTPStatus.UNPROCESSABLE_ENTITY
    mock_response.json.return_value = {
        "success": False,
        "error": "Invalid customer: 107",
        "error_type": "invalid_reference",
    }
    mock_post.return_value.__aenter__.return_value = mock_response

    with caplog.at_level("WARNING"):
        status, _ = await send_sample_fault()

    assert status == HTTPStatus.UNPROCESSABLE_ENTITY
    assert "run src.fault_triage.database.seed first" in caplog.text
