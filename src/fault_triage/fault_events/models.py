from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.fault_triage.database.database import Base

SOURCE_ID_CONSTRAINT = "uq_fault_events_source_id"


class FaultEventModel(Base):
    __tablename__ = "fault_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False)
    id_from_source: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id"), index=True, nullable=False
    )
    location_asset_id: Mapped[int] = mapped_column(
        ForeignKey("location_assets.id"), index=True, nullable=False
    )
    connector_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fault_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(String(255), nullable=False)
    downtime_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fault_type: Mapped[str] = mapped_column(String(255), nullable=False)
    is_alarm: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    urgency_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    response_time_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    station_wide: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    actions_taken: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # NULL id_from_source rows never collide, so keyless events stay distinct
    __table_args__ = (
        UniqueConstraint("source", "id_from_source", name=SOURCE_ID_CONSTRAINT),
    )

    def __repr__(self):
        return (
            f"<FaultEvent(id={self.id}, source='{self.source}', "
            f"id_from_source={self.id_from_source}, "
            f"fault_type='{self.fault_type}', "
            f"urgency_level='{self.urgency_level}')>"
        )
