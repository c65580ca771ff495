import asyncio
import logging

import websockets
from tenacity import retry, stop_after_attempt, wait_fixed

from src.fault_triage.config import get_settings
from src.fault_triage.websocket.models import TriageDecisionEvent

logger = logging.getLogger(__name__)
settings = get_settings()
ACTION_EXECUTOR_HOST = settings.ACTION_EXECUTOR_HOST
ACTION_EXECUTOR_PORT = settings.ACTION_EXECUTOR_PORT
ACTION_EXECUTOR_URL = f"ws://{ACTION_EXECUTOR_HOST}:{ACTION_EXECUTOR_PORT}"
ACTION_EXECUTOR_ACK_TIMEOUT_SECS = settings.ACTION_EXECUTOR_ACK_TIMEOUT_SECS


@retry(stop=stop_after_attempt(3), wait=wait_fixed(2), reraise=True)
async def send_triage_event(decision: TriageDecisionEvent):
    """
    Send a TriageDecisionEvent to the action executor via WebSocket.
    """
    try:
        async with websockets.connect(
            ACTION_EXECUTOR_URL, open_timeout=ACTION_EXECUTOR_ACK_TIMEOUT_SECS
        ) as websocket:
            payload = decision.model_dump_json()
            await websocket.send(payload)
            logger.info(
                f"Sent triage decision to WebSocket: ticket {decision.fault_event_id} "
                f"({decision.urgency}, {decision.ticket_action})"
            )

            # Executor acknowledges each decision
            response = await asyncio.wait_for(
                websocket.recv(), timeout=ACTION_EXECUTOR_ACK_TIMEOUT_SECS
            )
            if isinstance(response, bytes):
                response = response.decode("utf-8")
            logger.info(f"Received response from action executor: {response}")

            return response
    except asyncio.TimeoutError:
        logger.error(
            f"No ack from {ACTION_EXECUTOR_URL} for ticket {decision.fault_event_id} "
            f"within {ACTION_EXECUTOR_ACK_TIMEOUT_SECS}s"
        )
        raise
    except Exception as e:
        logger.error(f"Failed to send triage decision to {ACTION_EXECUTOR_URL}: {e}")
        raise
