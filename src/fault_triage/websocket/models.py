from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from src.fault_triage.fault_events.schemas import ProcessingResult


class TriageDecisionEvent(BaseModel):
    """Schema for triage decisions sent to the action executor"""

    event_type: str = "fault_triage"
    fault_event_id: int
    source: str
    id_from_source: Optional[int] = None
    customer_id: int
    location_asset_id: int
    urgency: str
    priority: Optional[str] = None
    actions: List[str]
    response_time_hours: Optional[int] = None
    station_wide: bool
    ticket_action: str
    processed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_result(cls, result: ProcessingResult) -> "TriageDecisionEvent":
        if not result.success or result.fault_event is None:
            raise ValueError("Only successful results carry a triage decision")
        ticket = result.fault_event
        return cls(
            fault_event_id=ticket.id,
            source=ticket.source,
            id_from_source=ticket.id_from_source,
            customer_id=ticket.customer_id,
            location_asset_id=ticket.location_asset_id,
            urgency=result.urgency.value if result.urgency else ticket.urgency_level,
            priority=result.priority,
            actions=result.actions,
            response_time_hours=result.response_time_hours,
            station_wide=result.station_wide,
            ticket_action=result.ticket_action.value if result.ticket_action else "",
            processed_at=ticket.processed_at,
        )
