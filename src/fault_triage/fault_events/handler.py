import json
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.fault_events.dependencies import get_fault_processor
from src.fault_triage.fault_events.exceptions import (
    FaultDecodeException,
    FaultEventException,
)
from src.fault_triage.fault_events.services import FaultProcessor

logger = logging.getLogger(__name__)


async def handle_fault_event(
    db: AsyncSession,
    payload: str,
    default_source: Optional[str] = None,
    processor: Optional[FaultProcessor] = None,
) -> dict:
    """
    Process one queue message body. Failures come back as an error dict so a
    bad message never stops the consumer.
    """
    try:
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    except ValueError as e:
        logger.error(f"Fault decode error: {str(e)}")
        error = FaultDecodeException(payload=payload, reason=str(e))
        return {"error": str(error), "error_type": error.error_type}

    # Queues are per feed, so the queue names the source when the body does not
    if default_source and not data.get("source"):
        data["source"] = default_source

    processor = processor or get_fault_processor()
    try:
        result = await processor.process(db, data)
    except Exception as e:
        logger.error(f"Unexpected error processing fault event: {str(e)}")
        error = FaultEventException(f"Unexpected error processing fault event: {e}")
        return {"error": str(error), "error_type": error.error_type}

    if not result.success:
        logger.warning(f"Fault event rejected ({result.error_type}): {result.error}")
        return {"error": result.error, "error_type": result.error_type}

    return result.model_dump(mode="json")
