from pydantic import BaseModel, ConfigDict, Field


class CustomerSnapshot(BaseModel):
    """Read-only view of a customer as seen by the triage engine."""

    id: int
    name: str
    sla_hours: int = Field(..., gt=0, description="Contracted max response hours")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class LocationAssetSnapshot(BaseModel):
    """Read-only view of a charging asset as seen by the triage engine."""

    id: int
    name: str
    location_id: int
    customer_id: int

    model_config = ConfigDict(from_attributes=True, frozen=True)
