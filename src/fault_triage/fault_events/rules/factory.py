from typing import List, Optional

from src.fault_triage.fault_events.rules.interface import ITriageRule
from src.fault_triage.fault_events.rules.lifecycle import DefaultRule, ResolutionRule
from src.fault_triage.fault_events.rules.scope import (
    StationWideRule,
    UnknownSourceErrorRule,
)
from src.fault_triage.fault_events.rules.severity import (
    CriticalSafetyRule,
    NeedsServiceRule,
    NoServiceNeededRule,
    UnreachableEscalationRule,
)
from src.fault_triage.fault_events.sla import SlaResolver
from src.fault_triage.fault_events.taxonomy import DEFAULT_TAXONOMY, FaultTaxonomy


class TriageRuleFactory:
    @staticmethod
    def create(
        taxonomy: FaultTaxonomy = DEFAULT_TAXONOMY,
        sla_resolver: Optional[SlaResolver] = None,
    ) -> List[ITriageRule]:
        """Build the rule chain in firing order."""
        sla_resolver = sla_resolver or SlaResolver()
        return [
            ResolutionRule(),
            CriticalSafetyRule(taxonomy, sla_resolver),
            UnreachableEscalationRule(taxonomy),
            NeedsServiceRule(taxonomy, sla_resolver),
            NoServiceNeededRule(taxonomy),
            StationWideRule(taxonomy),
            UnknownSourceErrorRule(taxonomy),
            DefaultRule(),
        ]
