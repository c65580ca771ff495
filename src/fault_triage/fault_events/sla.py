from dataclasses import dataclass
from src.fault_triage.fault_events.taxonomy import FaultAction, UrgencyLevel

# Critical faults are answered within this many hours whatever the contract says
CRITICAL_RESPONSE_HOURS = 1


@dataclass(frozen=True)
class SlaCommitment:
    urgency: UrgencyLevel
    response_time_hours: int
    dispatch_action: str


class SlaResolver:
    """Turns a customer's contracted response window into a commitment."""

    def __init__(
        self,
        urgent_max_hours: int = 2,
        standard_max_hours: int = 4,
        critical_response_hours: int = CRITICAL_RESPONSE_HOURS,
    ):
        self.urgent_max_hours = urgent_max_hours
        self.standard_max_hours = standard_max_hours
        self.critical_response_hours = critical_response_hours

    def resolve(self, sla_hours: int) -> SlaCommitment:
        if sla_hours <= self.urgent_max_hours:
            return SlaCommitment(
                UrgencyLevel.HIGH, sla_hours, FaultAction.DISPATCH_TECHNICIAN_URGENT
            )
        if sla_hours <= self.standard_max_hours:
            return SlaCommitment(
                UrgencyLevel.MEDIUM, sla_hours, FaultAction.DISPATCH_TECHNICIAN_STANDARD
            )
        return SlaCommitment(
            UrgencyLevel.LOW, sla_hours, FaultAction.DISPATCH_TECHNICIAN_STANDARD
        )

    def critical_response_time(self, sla_hours: int) -> int:
        return min(sla_hours, self.critical_response_hours)
