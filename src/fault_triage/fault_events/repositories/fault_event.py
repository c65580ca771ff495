import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.fault_events.exceptions import StorageConflictException
from src.fault_triage.fault_events.models import SOURCE_ID_CONSTRAINT, FaultEventModel
from src.fault_triage.fault_events.repositories.interface import (
    IFaultEventRepository,
)
from src.fault_triage.fault_events.schemas import FaultEventListParams

logger = logging.getLogger(__name__)


class FaultEventRepository(IFaultEventRepository):
    async def find_by_dedup_key(
        self, db: AsyncSession, source: str, id_from_source: int
    ) -> Optional[FaultEventModel]:
        q = await db.execute(
            select(FaultEventModel).where(
                FaultEventModel.source == source,
                FaultEventModel.id_from_source == id_from_source,
            )
        )
        return q.scalar_one_or_none()

    async def add(self, db: AsyncSession, ticket: FaultEventModel) -> FaultEventModel:
        db.add(ticket)
        try:
            await db.flush()
        except IntegrityError as e:
            if SOURCE_ID_CONSTRAINT in str(e.orig):
                logger.warning(
                    f"Unique violation for {ticket.source}/{ticket.id_from_source}"
                )
                raise StorageConflictException(
                    ticket.source, ticket.id_from_source, str(e.orig)
                ) from e
            raise
        logger.info(f"Fault event staged with ID: {ticket.id}")
        return ticket

    async def save(self, db: AsyncSession, ticket: FaultEventModel) -> FaultEventModel:
        await db.flush()
        logger.info(f"Fault event {ticket.id} updated")
        return ticket

    async def get_by_id(
        self, db: AsyncSession, fault_event_id: int
    ) -> Optional[FaultEventModel]:
        return await db.get(FaultEventModel, fault_event_id)

    async def list_fault_events(
        self, db: AsyncSession, params: FaultEventListParams
    ) -> Tuple[List[FaultEventModel], int]:
        conditions = []
        if params.source is not None:
            conditions.append(FaultEventModel.source == params.source)
        if params.id_from_source is not None:
            conditions.append(FaultEventModel.id_from_source == params.id_from_source)
        if params.customer_id is not None:
            conditions.append(FaultEventModel.customer_id == params.customer_id)
        if params.urgency_level is not None:
            conditions.append(
                FaultEventModel.urgency_level == params.urgency_level.value
            )
        if params.open_only:
            conditions.append(FaultEventModel.resolved_at.is_(None))

        stmt = (
            select(FaultEventModel)
            .where(*conditions)
            .order_by(FaultEventModel.fault_time.desc(), FaultEventModel.id.desc())
            .limit(params.page_size)
            .offset((params.page - 1) * params.page_size)
        )
        count_stmt = select(func.count()).select_from(FaultEventModel).where(*conditions)

        result = await db.execute(stmt)
        count_result = await db.execute(count_stmt)

        return list(result.scalars().all()), count_result.scalar_one()
