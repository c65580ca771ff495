from abc import ABC, abstractmethod

from src.fault_triage.websocket.client import send_triage_event
from src.fault_triage.websocket.models import TriageDecisionEvent


class IDecisionPublisher(ABC):
    @abstractmethod
    async def publish(self, decision: TriageDecisionEvent) -> None: ...


class WebSocketDecisionPublisher(IDecisionPublisher):
    async def publish(self, decision: TriageDecisionEvent) -> None:
        await send_triage_event(decision)
