from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.fault_triage.customers.models import CustomerModel, LocationAssetModel
from src.fault_triage.customers.schemas import CustomerSnapshot, LocationAssetSnapshot


class IReferenceRepository(ABC):
    @abstractmethod
    async def get_customer(
        self, db: AsyncSession, customer_id: int
    ) -> Optional[CustomerSnapshot]:
        pass

    @abstractmethod
    async def get_location_asset(
        self, db: AsyncSession, location_asset_id: int
    ) -> Optional[LocationAssetSnapshot]:
        pass


class ReferenceRepository(IReferenceRepository):
    async def get_customer(
        self, db: AsyncSession, customer_id: int
    ) -> Optional[CustomerSnapshot]:
        q = await db.execute(
            select(CustomerModel).where(CustomerModel.id == customer_id)
        )
        customer = q.scalar_one_or_none()
        if customer is None:
            return None
        return CustomerSnapshot.model_validate(customer)

    async def get_location_asset(
        self, db: AsyncSession, location_asset_id: int
    ) -> Optional[LocationAssetSnapshot]:
        q = await db.execute(
            select(LocationAssetModel).where(
                LocationAssetModel.id == location_asset_id
            )
        )
        asset = q.scalar_one_or_none()
        if asset is None:
            return None
        return LocationAssetSnapshot.model_validate(asset)
