from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.rules.interface import (
    ITriageRule,
    TriageAccumulator,
)
from src.fault_triage.fault_events.taxonomy import FaultAction, UrgencyLevel


class ResolutionRule(ITriageRule):
    name = "resolution"

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        return normalized.event.resolved_at is not None

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        acc.urgency = UrgencyLevel.RESOLVED
        acc.add_actions(FaultAction.CLOSE_TICKET, FaultAction.LOG_RESOLUTION)


class DefaultRule(ITriageRule):
    """Fallback when no earlier rule produced an urgency."""

    name = "default"

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        return acc.urgency is None

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        acc.urgency = UrgencyLevel.LOW
        acc.add_actions(FaultAction.LOG_AND_MONITOR)
