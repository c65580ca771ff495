from functools import lru_cache

from src.fault_triage.config import get_settings
from src.fault_triage.customers.repositories import ReferenceRepository
from src.fault_triage.fault_events.dedup import DeduplicationManager
from src.fault_triage.fault_events.engine import ClassificationEngine
from src.fault_triage.fault_events.locks import DedupLockArena
from src.fault_triage.fault_events.normalizer import EventNormalizer
from src.fault_triage.fault_events.publisher import WebSocketDecisionPublisher
from src.fault_triage.fault_events.repositories.fault_event import (
    FaultEventRepository,
)
from src.fault_triage.fault_events.repositories.interface import (
    IFaultEventRepository,
)
from src.fault_triage.fault_events.rules.factory import TriageRuleFactory
from src.fault_triage.fault_events.services import FaultProcessor
from src.fault_triage.fault_events.sla import SlaResolver
from src.fault_triage.fault_events.taxonomy import FaultTaxonomy
from src.fault_triage.redis.redis import redis_manager


def get_fault_event_repository() -> IFaultEventRepository:
    return FaultEventRepository()


# One processor per process so every caller shares the same lock arena
@lru_cache()
def get_fault_processor() -> FaultProcessor:
    settings = get_settings()
    taxonomy = FaultTaxonomy(
        unknown_error_sources=tuple(settings.UNKNOWN_ERROR_SOURCES)
    )
    rules = TriageRuleFactory.create(taxonomy, SlaResolver())
    lock_arena = DedupLockArena(
        redis_manager,
        lock_timeout=settings.FAULT_LOCK_TIMEOUT_SECS,
        blocking_timeout=settings.FAULT_LOCK_BLOCKING_TIMEOUT_SECS,
    )
    publisher = (
        WebSocketDecisionPublisher() if settings.ACTION_DISPATCH_ENABLED else None
    )
    return FaultProcessor(
        normalizer=EventNormalizer(ReferenceRepository()),
        engine=ClassificationEngine(rules),
        dedup=DeduplicationManager(get_fault_event_repository()),
        lock_arena=lock_arena,
        publisher=publisher,
    )
