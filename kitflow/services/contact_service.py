"""
Vendor and service provider directories.

Plain contact records; nothing else in the system references them except the
assistant's context.
"""
import logging
import uuid
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.exceptions import NotFound
from kitflow.models.contact import Vendor, ServiceProvider
from kitflow.schemas.contact import (
    VendorCreate, VendorUpdate,
    ServiceProviderCreate, ServiceProviderUpdate,
)


logger = logging.getLogger(__name__)


class VendorService:
    """Service for vendor contacts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_vendor(
        self,
        data: VendorCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> Vendor:
        vendor = Vendor(**data.model_dump(), created_by=user_id)
        self.db.add(vendor)
        await self.db.commit()
        await self.db.refresh(vendor)
        logger.info(f"Vendor created: {vendor.name}")
        return vendor

    async def get_vendor_or_404(self, vendor_id: uuid.UUID) -> Vendor:
        result = await self.db.execute(select(Vendor).where(Vendor.id == vendor_id))
        vendor = result.scalar_one_or_none()
        if not vendor:
            raise NotFound("Vendor not found")
        return vendor

    async def list_vendors(self, material_type: Optional[str] = None) -> List[Vendor]:
        query = select(Vendor)
        if material_type:
            query = query.where(Vendor.material_type == material_type)
        result = await self.db.execute(query.order_by(Vendor.name))
        return list(result.scalars().all())

    async def update_vendor(self, vendor_id: uuid.UUID, data: VendorUpdate) -> Vendor:
        vendor = await self.get_vendor_or_404(vendor_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(vendor, field, value)
        await self.db.commit()
        await self.db.refresh(vendor)
        return vendor

    async def delete_vendor(self, vendor_id: uuid.UUID) -> None:
        vendor = await self.get_vendor_or_404(vendor_id)
        await self.db.delete(vendor)
        await self.db.commit()
        logger.info(f"Vendor deleted: {vendor_id}")


class ServiceProviderService:
    """Service for service provider contacts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_service(
        self,
        data: ServiceProviderCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> ServiceProvider:
        provider = ServiceProvider(**data.model_dump(), created_by=user_id)
        self.db.add(provider)
        await self.db.commit()
        await self.db.refresh(provider)
        logger.info(f"Service provider created: {provider.name} ({provider.service_type})")
        return provider

    async def get_service_or_404(self, service_id: uuid.UUID) -> ServiceProvider:
        result = await self.db.execute(
            select(ServiceProvider).where(ServiceProvider.id == service_id)
        )
        provider = result.scalar_one_or_none()
        if not provider:
            raise NotFound("Service provider not found")
        return provider

    async def list_services(self, service_type: Optional[str] = None) -> List[ServiceProvider]:
        query = select(ServiceProvider)
        if service_type:
            query = query.where(ServiceProvider.service_type == service_type)
        result = await self.db.execute(query.order_by(ServiceProvider.name))
        return list(result.scalars().all())

    async def update_service(
        self,
        service_id: uuid.UUID,
        data: ServiceProviderUpdate
    ) -> ServiceProvider:
        provider = await self.get_service_or_404(service_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(provider, field, value)
        await self.db.commit()
        await self.db.refresh(provider)
        return provider

    async def delete_service(self, service_id: uuid.UUID) -> None:
        provider = await self.get_service_or_404(service_id)
        await self.db.delete(provider)
        await self.db.commit()
        logger.info(f"Service provider deleted: {service_id}")
