from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.fault_events.models import FaultEventModel
from src.fault_triage.fault_events.schemas import FaultEventListParams


class IFaultEventRepository(ABC):
    @abstractmethod
    async def find_by_dedup_key(
        self, db: AsyncSession, source: str, id_from_source: int
    ) -> Optional[FaultEventModel]: ...

    @abstractmethod
    async def add(self, db: AsyncSession, ticket: FaultEventModel) -> FaultEventModel:
        """
        Stage a new ticket and flush it so it gets its identity.
        Raises StorageConflictException when the dedup key is already taken.
        """
        ...

    @abstractmethod
    async def save(self, db: AsyncSession, ticket: FaultEventModel) -> FaultEventModel:
        """
        Flush in-place changes to an existing ticket.
        """
        ...

    @abstractmethod
    async def get_by_id(
        self, db: AsyncSession, fault_event_id: int
    ) -> Optional[FaultEventModel]: ...

    @abstractmethod
    async def list_fault_events(
        self, db: AsyncSession, params: FaultEventListParams
    ) -> Tuple[List[FaultEventModel], int]: ...
