"""
Triage vocabulary: urgency levels, action names and the fault-type patterns the
classification rules match against.

Everything the rules compare with upstream free text is declared here, so new
fault-type vocabulary is added by editing a table rather than rule code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Tuple


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"
    RESOLVED = "resolved"


class TicketAction(str, Enum):
    CREATE_NEW = "create_new"
    UPDATE_EXISTING = "update_existing"


# Severity order for the escalating urgencies; RESOLVED is terminal, not ranked.
URGENCY_RANK = {
    UrgencyLevel.INFO: 0,
    UrgencyLevel.LOW: 1,
    UrgencyLevel.MEDIUM: 2,
    UrgencyLevel.HIGH: 3,
    UrgencyLevel.CRITICAL: 4,
}

PRIORITY_BY_URGENCY = {
    UrgencyLevel.CRITICAL: "immediate",
    UrgencyLevel.HIGH: "urgent",
    UrgencyLevel.MEDIUM: "standard",
    UrgencyLevel.LOW: "routine",
    UrgencyLevel.INFO: "none",
    UrgencyLevel.RESOLVED: "none",
}


def priority_for(urgency: Optional[UrgencyLevel]) -> Optional[str]:
    if urgency is None:
        return None
    return PRIORITY_BY_URGENCY[UrgencyLevel(urgency)]


class FaultAction:
    """Names of the actions handed to downstream executors."""

    CLOSE_TICKET = "close_ticket"
    LOG_RESOLUTION = "log_resolution"
    DISPATCH_TECHNICIAN = "dispatch_technician"
    DISPATCH_TECHNICIAN_URGENT = "dispatch_technician_urgent"
    DISPATCH_TECHNICIAN_STANDARD = "dispatch_technician_standard"
    NOTIFY_CUSTOMER = "notify_customer"
    ESCALATE_TO_OPS = "escalate_to_ops"
    LOG_AND_MONITOR = "log_and_monitor"
    LOG_ONLY = "log_only"
    CHECK_NETWORK_STATUS = "check_network_status"
    LOG_UNKNOWN_ERROR = "log_unknown_error"
    UPDATE_EXISTING_TICKET = "update_existing_ticket"


# Actions that send a technician; never re-issued for an already open ticket.
DISPATCH_ACTIONS = frozenset(
    {
        FaultAction.DISPATCH_TECHNICIAN,
        FaultAction.DISPATCH_TECHNICIAN_URGENT,
        FaultAction.DISPATCH_TECHNICIAN_STANDARD,
    }
)


@dataclass(frozen=True)
class FaultPattern:
    """One case-sensitive text pattern: substring, prefix or exact match."""

    value: str
    kind: Literal["contains", "prefix", "equals"] = "equals"

    def matches(self, text: Optional[str]) -> bool:
        if not text:
            return False
        if self.kind == "contains":
            return self.value in text
        if self.kind == "prefix":
            return text.startswith(self.value)
        return text == self.value


def matches_any(patterns: Tuple[FaultPattern, ...], text: Optional[str]) -> bool:
    return any(pattern.matches(text) for pattern in patterns)


@dataclass(frozen=True)
class FaultTaxonomy:
    """Pattern tables consulted by the classification rules."""

    critical_fault_types: Tuple[FaultPattern, ...] = (
        FaultPattern("Ground Fault", "contains"),
    )
    unreachable_statuses: Tuple[FaultPattern, ...] = (
        FaultPattern("UNREACHABLE", "prefix"),
    )
    unreachable_fault_types: Tuple[FaultPattern, ...] = (
        FaultPattern("Unreachable", "equals"),
    )
    network_error_types: Tuple[FaultPattern, ...] = (
        FaultPattern("network error", "equals"),
    )
    needs_service_status: str = "NEEDS SERVICE"
    # Sources whose unrecognized fault types get extra diagnostic logging
    unknown_error_sources: Tuple[str, ...] = ("synop",)
    extra_recognized_fault_types: Tuple[FaultPattern, ...] = field(default=())

    @property
    def recognized_fault_types(self) -> Tuple[FaultPattern, ...]:
        return (
            self.critical_fault_types
            + self.unreachable_fault_types
            + self.extra_recognized_fault_types
        )

    def is_recognized(self, fault_type: Optional[str]) -> bool:
        return matches_any(self.recognized_fault_types, fault_type)


DEFAULT_TAXONOMY = FaultTaxonomy()
