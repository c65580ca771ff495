"""Post a sample Ground Fault event to a running API and print the triage result.

    python -m src.fault_triage.scripts.sample_fault

Needs the reference rows from src.fault_triage.database.seed.
"""

import asyncio
import json
import logging
import os

import aiohttp

from src.fault_triage.config import get_settings
from src.fault_triage.database.seed import SEED_ASSETS, SEED_CUSTOMERS
from src.fault_triage.logging_config import setup_logging

logger = logging.getLogger(__name__)
settings = get_settings()
FAULT_TRIAGE_API_URL = os.getenv("FAULT_TRIAGE_API_URL", "http://localhost:8000")
FAULT_EVENTS_PATH = "/api/v1/fault_events"


def sample_fault_event() -> dict:
    customer, asset = SEED_CUSTOMERS[0], SEED_ASSETS[0]
    return {
        "id_from_source": 19824588,
        "customer_id": customer["id"],
        "location_asset_id": asset["id"],
        "connector_id": 2,
        "fault_time": "2025-06-04T14:53:13.000Z",
        "resolved_at": None,
        "status": "NEEDS SERVICE",
        "downtime_type": "NEEDS SERVICE",
        "fault_type": "Ground Fault Circuit Interrupter",
        "source": "chargepoint",
        "is_alarm": True,
    }


async def send_sample_fault(base_url: str = FAULT_TRIAGE_API_URL) -> tuple[int, dict]:
    url = f"{base_url.rstrip('/')}{FAULT_EVENTS_PATH}"
    headers = {settings.FASTAPI_API_KEY_HEADER: settings.FASTAPI_API_KEY}

    async with aiohttp.ClientSession() as session:
        async with session.post(
            url, json=sample_fault_event(), headers=headers
        ) as response:
            body = await response.json(content_type=None)
            logger.info(f"POST {url} -> {response.status}")

            if isinstance(body, dict) and body.get("error_type") == "invalid_reference":
                logger.warning(
                    "Reference rows missing, run src.fault_triage.database.seed first"
                )
            return response.status, body


async def main():
    setup_logging()
    status, body = await send_sample_fault()
    print(f"Response: {status}")
    print(json.dumps(body, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
