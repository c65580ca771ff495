from datetime import UTC, datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.fault_triage.fault_events.exceptions import FaultEventException
from src.fault_triage.fault_events.taxonomy import (
    TicketAction,
    UrgencyLevel,
    priority_for,
)


# Upper bound of the 32-bit INTEGER columns the ids are stored in
MAX_DB_INT = 2**31 - 1


class FaultEventPayload(BaseModel):
    """Typed fault event as reported by an upstream monitoring feed"""

    id_from_source: Optional[int] = Field(None, ge=0, le=MAX_DB_INT)
    customer_id: int = Field(..., ge=1, le=MAX_DB_INT)
    location_asset_id: int = Field(..., ge=1, le=MAX_DB_INT)
    connector_id: Optional[int] = Field(None, ge=0, le=MAX_DB_INT)
    fault_time: datetime = Field(..., description="When the upstream feed saw it")
    resolved_at: Optional[datetime] = None
    status: str = Field(..., min_length=1)
    downtime_type: Optional[str] = None
    fault_type: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    is_alarm: bool = False
    urgency_level: Optional[UrgencyLevel] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("is_alarm", mode="before")
    @classmethod
    def default_is_alarm(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("urgency_level", mode="before")
    @classmethod
    def blank_urgency_is_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("fault_time", "resolved_at")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps from the feeds are UTC
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def dedup_key(self) -> Optional[Tuple[str, int]]:
        if self.id_from_source is None:
            return None
        return (self.source, self.id_from_source)


class TriageClassification(BaseModel):
    """Outcome of the classification rules plus the SLA commitment"""

    urgency: UrgencyLevel
    actions: Tuple[str, ...]
    station_wide: bool
    response_time_hours: Optional[int] = None
    fired_rules: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def priority(self) -> str:
        return priority_for(self.urgency) or "none"


class FaultEventResponse(BaseModel):
    id: int
    source: str
    id_from_source: Optional[int] = None
    customer_id: int
    location_asset_id: int
    connector_id: Optional[int] = None
    fault_time: datetime
    resolved_at: Optional[datetime] = None
    status: str
    downtime_type: Optional[str] = None
    fault_type: str
    is_alarm: bool
    urgency_level: Optional[str] = None
    response_time_hours: Optional[int] = None
    station_wide: bool
    actions_taken: List[str] = []
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProcessingResult(BaseModel):
    """Value returned to callers for every processed fault event"""

    success: bool
    error: Optional[str] = None
    error_type: Optional[str] = None
    urgency: Optional[UrgencyLevel] = None
    actions: List[str] = []
    response_time_hours: Optional[int] = None
    priority: Optional[str] = None
    station_wide: bool = False
    ticket_action: Optional[TicketAction] = None
    fault_event: Optional[FaultEventResponse] = None

    @classmethod
    def failure(cls, exc: FaultEventException) -> "ProcessingResult":
        return cls(success=False, error=exc.message, error_type=exc.error_type)

    @classmethod
    def from_ticket(
        cls,
        classification: TriageClassification,
        actions: List[str],
        ticket_action: TicketAction,
        fault_event: FaultEventResponse,
    ) -> "ProcessingResult":
        return cls(
            success=True,
            urgency=classification.urgency,
            actions=actions,
            response_time_hours=classification.response_time_hours,
            priority=classification.priority,
            station_wide=classification.station_wide,
            ticket_action=ticket_action,
            fault_event=fault_event,
        )


class FaultEventListParams(BaseModel):
    source: Optional[str] = Field(None, description="Upstream feed")
    id_from_source: Optional[int] = Field(
        None, ge=0, le=MAX_DB_INT, description="Feed-assigned identifier"
    )
    customer_id: Optional[int] = Field(
        None, ge=1, le=MAX_DB_INT, description="Owning customer"
    )
    urgency_level: Optional[UrgencyLevel] = Field(None, description="Urgency filter")
    open_only: bool = Field(False, description="Only tickets without resolved_at")
    page: int = Field(1, ge=1, description="Page number for pagination")
    page_size: int = Field(20, ge=1, le=100, description="Number of results per page")
