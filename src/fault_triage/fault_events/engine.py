import logging
from typing import List, Optional

from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.rules.factory import TriageRuleFactory
from src.fault_triage.fault_events.rules.interface import (
    ITriageRule,
    TriageAccumulator,
)
from src.fault_triage.fault_events.schemas import TriageClassification

logger = logging.getLogger(__name__)


class ClassificationEngine:
    """
    Runs the triage rules in order against one normalized event.

    Classification reads nothing but its input, so the same event always
    yields the same urgency, actions and response time.
    """

    def __init__(self, rules: Optional[List[ITriageRule]] = None):
        self.rules = rules if rules is not None else TriageRuleFactory.create()

    def classify(self, normalized: NormalizedFaultEvent) -> TriageClassification:
        acc = TriageAccumulator()
        for rule in self.rules:
            if rule.matches(normalized, acc):
                rule.apply(normalized, acc)
                acc.fired_rules.append(rule.name)

        if acc.urgency is None:
            raise ValueError("Rule chain finished without assigning an urgency")

        logger.debug(
            f"Classified {normalized.event.source}/{normalized.event.id_from_source}: "
            f"urgency={acc.urgency.value} rules={acc.fired_rules}"
        )
        return TriageClassification(
            urgency=acc.urgency,
            actions=tuple(acc.actions),
            station_wide=acc.station_wide,
            response_time_hours=acc.response_time_hours,
            fired_rules=tuple(acc.fired_rules),
        )
