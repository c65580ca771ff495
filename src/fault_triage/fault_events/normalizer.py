import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.customers.repositories import IReferenceRepository
from src.fault_triage.customers.schemas import CustomerSnapshot, LocationAssetSnapshot
from src.fault_triage.fault_events.exceptions import (
    FaultValidationException,
    InvalidReferenceException,
)
from src.fault_triage.fault_events.schemas import FaultEventPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedFaultEvent:
    """Typed event together with the customer and asset it references."""

    event: FaultEventPayload
    customer: CustomerSnapshot
    asset: LocationAssetSnapshot


def parse_payload(payload: Any) -> FaultEventPayload:
    """
    Coerce an untyped payload into a FaultEventPayload.

    Raises FaultValidationException naming the first offending field.
    """
    if isinstance(payload, FaultEventPayload):
        return payload
    if not isinstance(payload, Mapping):
        raise FaultValidationException(
            "payload", f"expected a JSON object, got {type(payload).__name__}"
        )
    try:
        return FaultEventPayload.model_validate(dict(payload))
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "payload"
        raise FaultValidationException(field, error["msg"])


class EventNormalizer:
    def __init__(self, reference_repo: IReferenceRepository):
        self._repo = reference_repo

    async def normalize(self, db: AsyncSession, payload: Any) -> NormalizedFaultEvent:
        event = parse_payload(payload)

        customer = await self._repo.get_customer(db, event.customer_id)
        if customer is None:
            logger.warning(f"Unknown customer_id {event.customer_id}")
            raise InvalidReferenceException.missing_customer(event.customer_id)

        asset = await self._repo.get_location_asset(db, event.location_asset_id)
        if asset is None:
            logger.warning(f"Unknown location_asset_id {event.location_asset_id}")
            raise InvalidReferenceException.missing_asset(event.location_asset_id)

        if asset.customer_id != customer.id:
            logger.warning(
                f"Asset {asset.id} belongs to customer {asset.customer_id}, "
                f"event claims customer {customer.id}"
            )
            raise InvalidReferenceException.ownership_mismatch(
                asset.id, asset.customer_id, customer.id
            )

        return NormalizedFaultEvent(event=event, customer=customer, asset=asset)
