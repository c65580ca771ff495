from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.taxonomy import URGENCY_RANK, UrgencyLevel


@dataclass
class TriageAccumulator:
    """Mutable state threaded through the rules in firing order."""

    urgency: Optional[UrgencyLevel] = None
    actions: List[str] = field(default_factory=list)
    station_wide: bool = False
    response_time_hours: Optional[int] = None
    fired_rules: List[str] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return self.urgency == UrgencyLevel.RESOLVED

    def has_fired(self, *rule_names: str) -> bool:
        return any(name in self.fired_rules for name in rule_names)

    def add_actions(self, *actions: str) -> None:
        for action in actions:
            if action not in self.actions:
                self.actions.append(action)

    def claim_urgency(self, urgency: UrgencyLevel) -> None:
        """Set urgency only if no earlier rule has set it."""
        if self.urgency is None:
            self.urgency = urgency

    def raise_urgency(self, urgency: UrgencyLevel) -> None:
        """Raise urgency to at least `urgency`; a resolved ticket stays resolved."""
        if self.is_resolved:
            return
        if self.urgency is None or URGENCY_RANK[self.urgency] < URGENCY_RANK[urgency]:
            self.urgency = urgency


class ITriageRule(ABC):
    name: str

    @abstractmethod
    def matches(
        self, normalized: NormalizedFaultEvent, acc: TriageAccumulator
    ) -> bool: ...

    @abstractmethod
    def apply(self, normalized: NormalizedFaultEvent, acc: TriageAccumulator) -> None:
        """
        Mutate the accumulator with this rule's urgency, actions and flags.
        """
        ...
