"""
Urgency-setting rules. None of them fire once the resolution rule has marked the
event resolved.
"""

from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.rules.interface import (
    ITriageRule,
    TriageAccumulator,
)
from src.fault_triage.fault_events.sla import SlaResolver
from src.fault_triage.fault_events.taxonomy import (
    FaultAction,
    FaultTaxonomy,
    UrgencyLevel,
    matches_any,
)


class CriticalSafetyRule(ITriageRule):
    name = "critical_safety"

    def __init__(self, taxonomy: FaultTaxonomy, sla_resolver: SlaResolver):
        self.taxonomy = taxonomy
        self.sla_resolver = sla_resolver

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if acc.is_resolved:
            return False
        event = normalized.event
        return (
            matches_any(self.taxonomy.critical_fault_types, event.fault_type)
            or event.urgency_level == UrgencyLevel.CRITICAL
        )

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        acc.urgency = UrgencyLevel.CRITICAL
        acc.add_actions(FaultAction.DISPATCH_TECHNICIAN, FaultAction.NOTIFY_CUSTOMER)
        # Safety overrides the contracted window
        acc.response_time_hours = self.sla_resolver.critical_response_time(
            normalized.customer.sla_hours
        )


class UnreachableEscalationRule(ITriageRule):
    name = "unreachable_escalation"

    def __init__(self, taxonomy: FaultTaxonomy):
        self.taxonomy = taxonomy

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if acc.is_resolved:
            return False
        event = normalized.event
        return matches_any(
            self.taxonomy.unreachable_statuses, event.status
        ) or matches_any(self.taxonomy.unreachable_fault_types, event.fault_type)

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if acc.urgency != UrgencyLevel.CRITICAL:
            acc.urgency = UrgencyLevel.HIGH
        acc.add_actions(FaultAction.ESCALATE_TO_OPS, FaultAction.NOTIFY_CUSTOMER)


class NeedsServiceRule(ITriageRule):
    name = "needs_service"

    def __init__(self, taxonomy: FaultTaxonomy, sla_resolver: SlaResolver):
        self.taxonomy = taxonomy
        self.sla_resolver = sla_resolver

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if acc.is_resolved:
            return False
        if acc.has_fired(CriticalSafetyRule.name, UnreachableEscalationRule.name):
            return False
        return normalized.event.status == self.taxonomy.needs_service_status

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        commitment = self.sla_resolver.resolve(normalized.customer.sla_hours)
        acc.claim_urgency(commitment.urgency)
        acc.add_actions(commitment.dispatch_action)
        acc.response_time_hours = commitment.response_time_hours


class NoServiceNeededRule(ITriageRule):
    name = "no_service_needed"

    def __init__(self, taxonomy: FaultTaxonomy):
        self.taxonomy = taxonomy

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if acc.is_resolved:
            return False
        return normalized.event.status != self.taxonomy.needs_service_status

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        if normalized.event.is_alarm:
            acc.claim_urgency(UrgencyLevel.LOW)
            acc.add_actions(FaultAction.LOG_AND_MONITOR)
        else:
            acc.claim_urgency(UrgencyLevel.INFO)
            acc.add_actions(FaultAction.LOG_ONLY)
