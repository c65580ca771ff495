from typing import Any, Dict

from src.fault_triage.customers.schemas import CustomerSnapshot, LocationAssetSnapshot
from src.fault_triage.fault_events.normalizer import NormalizedFaultEvent
from src.fault_triage.fault_events.schemas import FaultEventPayload

FAST_RESPONSE_CUSTOMER = CustomerSnapshot(id=107, name="Fast Response Corp", sla_hours=2)
STANDARD_CUSTOMER = CustomerSnapshot(id=261, name="Standard Service LLC", sla_hours=4)
RELAXED_CUSTOMER = CustomerSnapshot(id=300, name="Relaxed Fleet Co", sla_hours=8)

DOWNTOWN_ASSET = LocationAssetSnapshot(
    id=12920, name="Station A", location_id=1, customer_id=107
)
MALL_ASSET = LocationAssetSnapshot(
    id=56828, name="Station B", location_id=2, customer_id=261
)
DEPOT_ASSET = LocationAssetSnapshot(
    id=70001, name="Depot Charger", location_id=3, customer_id=300
)

CUSTOMERS = [FAST_RESPONSE_CUSTOMER, STANDARD_CUSTOMER, RELAXED_CUSTOMER]
ASSETS = [DOWNTOWN_ASSET, MALL_ASSET, DEPOT_ASSET]
ASSET_BY_CUSTOMER = {asset.customer_id: asset for asset in ASSETS}
CUSTOMER_BY_ID = {customer.id: customer for customer in CUSTOMERS}


def fault_payload(**overrides: Any) -> Dict[str, Any]:
    """Raw event as an upstream feed would post it; a needs-service fault."""
    payload: Dict[str, Any] = {
        "id_from_source": 19824590,
        "customer_id": FAST_RESPONSE_CUSTOMER.id,
        "location_asset_id": DOWNTOWN_ASSET.id,
        "connector_id": 1,
        "fault_time": "2025-06-04T15:30:12.000Z",
        "resolved_at": None,
        "status": "NEEDS SERVICE",
        "downtime_type": "NEEDS SERVICE",
        "fault_type": "Payment Terminal Error",
        "source": "chargepoint",
        "is_alarm": True,
    }
    payload.update(overrides)
    return payload


def normalized_event(customer_id: int = 107, **overrides: Any) -> NormalizedFaultEvent:
    customer = CUSTOMER_BY_ID[customer_id]
    asset = ASSET_BY_CUSTOMER[customer_id]
    event = FaultEventPayload.model_validate(
        fault_payload(customer_id=customer.id, location_asset_id=asset.id, **overrides)
    )
    return NormalizedFaultEvent(event=event, customer=customer, asset=asset)
