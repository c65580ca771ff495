import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.fault_events.models import FaultEventModel
from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.repositories.interface import (
    IFaultEventRepository,
)
from src.fault_triage.fault_events.schemas import TriageClassification
from src.fault_triage.fault_events.taxonomy import (
    DISPATCH_ACTIONS,
    FaultAction,
    TicketAction,
)

logger = logging.getLogger(__name__)


@dataclass
class Reconciliation:
    ticket: FaultEventModel
    ticket_action: TicketAction
    actions: List[str]


def suppress_redispatch(actions: Iterable[str]) -> List[str]:
    """Drop dispatch actions and mark the call as an update of an open ticket."""
    kept = [action for action in actions if action not in DISPATCH_ACTIONS]
    if FaultAction.UPDATE_EXISTING_TICKET not in kept:
        kept.append(FaultAction.UPDATE_EXISTING_TICKET)
    return kept


class DeduplicationManager:
    """
    Finds or creates the ticket for an event's (source, id_from_source) key.

    Must run inside the per-key critical section; it only stages changes,
    the caller owns the transaction.
    """

    def __init__(self, fault_repo: IFaultEventRepository):
        self._repo = fault_repo

    async def reconcile(
        self,
        db: AsyncSession,
        normalized: NormalizedFaultEvent,
        classification: TriageClassification,
        processed_at: datetime,
    ) -> Reconciliation:
        event = normalized.event

        existing = None
        if event.id_from_source is not None:
            existing = await self._repo.find_by_dedup_key(
                db, event.source, event.id_from_source
            )

        if existing is None:
            actions = list(classification.actions)
            ticket = FaultEventModel(
                source=event.source,
                id_from_source=event.id_from_source,
                customer_id=normalized.customer.id,
                location_asset_id=normalized.asset.id,
                connector_id=event.connector_id,
                fault_time=event.fault_time,
                resolved_at=event.resolved_at,
                status=event.status,
                downtime_type=event.downtime_type,
                fault_type=event.fault_type,
                is_alarm=event.is_alarm,
                urgency_level=classification.urgency.value,
                response_time_hours=classification.response_time_hours,
                station_wide=classification.station_wide,
                actions_taken=actions,
                processed_at=processed_at,
            )
            ticket = await self._repo.add(db, ticket)
            return Reconciliation(ticket, TicketAction.CREATE_NEW, actions)

        logger.info(
            f"Duplicate report for {event.source}/{event.id_from_source}, "
            f"updating ticket {existing.id}"
        )
        actions = suppress_redispatch(classification.actions)
        existing.status = event.status
        existing.downtime_type = event.downtime_type
        existing.fault_type = event.fault_type
        existing.resolved_at = event.resolved_at
        existing.is_alarm = event.is_alarm
        existing.urgency_level = classification.urgency.value
        existing.response_time_hours = classification.response_time_hours
        existing.station_wide = classification.station_wide
        existing.actions_taken = actions
        existing.processed_at = processed_at
        ticket = await self._repo.save(db, existing)
        return Reconciliation(ticket, TicketAction.UPDATE_EXISTING, actions)
