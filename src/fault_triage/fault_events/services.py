import asyncio
import logging
from datetime import UTC, datetime
from typing import Any, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from src.fault_triage.fault_events.dedup import DeduplicationManager
from src.fault_triage.fault_events.engine import ClassificationEngine
from src.fault_triage.fault_events.exceptions import (
    FaultValidationException,
    InvalidReferenceException,
    StorageConflictException,
)
from src.fault_triage.fault_events.locks import DedupLockArena
from src.fault_triage.fault_events.normalizer import EventNormalizer, parse_payload
from src.fault_triage.fault_events.publisher import IDecisionPublisher
from src.fault_triage.fault_events.schemas import (
    FaultEventPayload,
    FaultEventResponse,
    ProcessingResult,
)
from src.fault_triage.websocket.models import TriageDecisionEvent

logger = logging.getLogger(__name__)
# One line per ticket create/update, routed to triage.log
decision_logger = logging.getLogger(f"{__name__}.decisions")


class FaultProcessor:
    """
    Processes one fault event end to end: normalize, classify, reconcile with
    the existing ticket and commit, all inside the per-key critical section.
    """

    def __init__(
        self,
        normalizer: EventNormalizer,
        engine: ClassificationEngine,
        dedup: DeduplicationManager,
        lock_arena: DedupLockArena,
        publisher: Optional[IDecisionPublisher] = None,
    ):
        self.normalizer = normalizer
        self.engine = engine
        self.dedup = dedup
        self.lock_arena = lock_arena
        self.publisher = publisher
        self._pending_publishes: Set[asyncio.Task] = set()

    async def process(self, db: AsyncSession, payload: Any) -> ProcessingResult:
        try:
            event = parse_payload(payload)
        except FaultValidationException as e:
            logger.warning(f"Rejected fault event: {e.message}")
            return ProcessingResult.failure(e)

        try:
            async with self.lock_arena.hold(event.dedup_key):
                result = await self._process_locked(db, event)
        except (InvalidReferenceException, StorageConflictException) as e:
            logger.warning(
                f"Fault event {event.source}/{event.id_from_source} failed "
                f"({e.error_type}): {e.message}"
            )
            return ProcessingResult.failure(e)

        self._schedule_publish(result)
        return result

    @retry(
        retry=retry_if_exception_type(StorageConflictException),
        stop=stop_after_attempt(2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _process_locked(
        self, db: AsyncSession, event: FaultEventPayload
    ) -> ProcessingResult:
        try:
            normalized = await self.normalizer.normalize(db, event)
            classification = self.engine.classify(normalized)
            reconciliation = await self.dedup.reconcile(
                db, normalized, classification, datetime.now(UTC)
            )
            await db.commit()
            await db.refresh(reconciliation.ticket)
        except Exception:
            await db.rollback()
            raise

        decision_logger.info(
            f"Fault event {event.source}/{event.id_from_source} -> ticket "
            f"{reconciliation.ticket.id} ({reconciliation.ticket_action.value}, "
            f"urgency={classification.urgency.value})"
        )
        return ProcessingResult.from_ticket(
            classification,
            reconciliation.actions,
            reconciliation.ticket_action,
            FaultEventResponse.model_validate(reconciliation.ticket),
        )

    @property
    def pending_publishes(self) -> int:
        return len(self._pending_publishes)

    def _schedule_publish(self, result: ProcessingResult) -> None:
        if self.publisher is None:
            return
        # Executor retries and acks run after the caller already has its result
        task = asyncio.create_task(
            self._publish(TriageDecisionEvent.from_result(result))
        )
        self._pending_publishes.add(task)
        task.add_done_callback(self._pending_publishes.discard)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight publishes; cancel whatever is left after `timeout`."""
        if not self._pending_publishes:
            return
        _, pending = await asyncio.wait(set(self._pending_publishes), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(f"Cancelled {len(pending)} unsent triage decision(s)")

    async def _publish(self, decision: TriageDecisionEvent) -> None:
        try:
            await self.publisher.publish(decision)
        except Exception as e:
            # Ticket is already committed; the decision can be replayed from it
            logger.error(f"Failed to publish triage decision: {e}")
