import logging

from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.rules.interface import (
    ITriageRule,
    TriageAccumulator,
)
from src.fault_triage.fault_events.taxonomy import (
    FaultAction,
    FaultTaxonomy,
    UrgencyLevel,
    matches_any,
)

logger = logging.getLogger(__name__)


class StationWideRule(ITriageRule):
    """Missing connector or a network error affects the whole location."""

    name = "station_wide"

    def __init__(self, taxonomy: FaultTaxonomy):
        self.taxonomy = taxonomy

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        event = normalized.event
        if event.connector_id is None:
            return True
        return matches_any(
            self.taxonomy.network_error_types, event.downtime_type
        ) or matches_any(self.taxonomy.network_error_types, event.fault_type)

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        acc.station_wide = True
        acc.add_actions(FaultAction.CHECK_NETWORK_STATUS)


class UnknownSourceErrorRule(ITriageRule):
    name = "unknown_source_error"

    def __init__(self, taxonomy: FaultTaxonomy):
        self.taxonomy = taxonomy

    def matches(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        event = normalized.event
        return event.source in self.taxonomy.unknown_error_sources and not (
            self.taxonomy.is_recognized(event.fault_type)
        )

    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator):
        logger.info(
            f"Unrecognized fault type '{normalized.event.fault_type}' "
            f"from source '{normalized.event.source}'"
        )
        acc.add_actions(FaultAction.LOG_UNKNOWN_ERROR)
        acc.raise_urgency(UrgencyLevel.MEDIUM)
