"""Repository layer for the entity store.

Repositories never commit; the calling service owns the transaction.
Relationships are always eager-loaded so nothing lazy-loads under asyncio.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from orgportal.logging_config import get_logger
from orgportal.models import (
    Organization,
    PendingOrganization,
    PendingService,
    Service,
    ServiceSubmission,
)

logger = get_logger(__name__)


class PendingOrganizationRepository:
    """Repository for staged organizations and their staged services."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, services: list[dict], **kwargs) -> PendingOrganization:
        org = PendingOrganization(
            **kwargs,
            services=[PendingService(position=i, **s) for i, s in enumerate(services)],
        )
        self.session.add(org)
        await self.session.flush()
        return org

    async def get(self, org_id: UUID, *, for_update: bool = False) -> PendingOrganization | None:
        query = (
            select(PendingOrganization)
            .where(PendingOrganization.id == org_id)
            .options(selectinload(PendingOrganization.services))
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: str | None = None,
        owner_id: UUID | None = None,
    ) -> list[PendingOrganization]:
        query = select(PendingOrganization).options(
            selectinload(PendingOrganization.services)
        )
        if status:
            query = query.where(PendingOrganization.status == status)
        if owner_id:
            query = query.where(PendingOrganization.owner_user_id == owner_id)
        query = query.order_by(PendingOrganization.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, status: str | None = None) -> int:
        query = select(func.count()).select_from(PendingOrganization)
        if status:
            query = query.where(PendingOrganization.status == status)
        result = await self.session.execute(query)
        return result.scalar() or 0

    def replace_services(self, org: PendingOrganization, services: list[dict]) -> None:
        """Swap the staged service list; orphaned rows are deleted on flush."""
        org.services = [PendingService(position=i, **s) for i, s in enumerate(services)]

    async def delete(self, org_id: UUID) -> bool:
        """Delete the staged services, then the organization."""
        await self.session.execute(
            delete(PendingService).where(PendingService.organization_id == org_id)
        )
        result = await self.session.execute(
            delete(PendingOrganization).where(PendingOrganization.id == org_id)
        )
        return result.rowcount > 0


class OrganizationRepository:
    """Repository for live organizations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, services: list[dict], **kwargs) -> Organization:
        org = Organization(
            **kwargs,
            services=[Service(position=i, **s) for i, s in enumerate(services)],
        )
        self.session.add(org)
        await self.session.flush()
        return org

    async def get(self, org_id: UUID, *, for_update: bool = False) -> Organization | None:
        query = (
            select(Organization)
            .where(Organization.id == org_id)
            .options(selectinload(Organization.services))
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: str | None = None,
        owner_id: UUID | None = None,
    ) -> list[Organization]:
        query = select(Organization).options(selectinload(Organization.services))
        if status:
            query = query.where(Organization.status == status)
        if owner_id:
            query = query.where(Organization.owner_user_id == owner_id)
        query = query.order_by(Organization.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete(self, org_id: UUID) -> bool:
        """Delete the organization and, explicitly, its services and submissions."""
        await self.session.execute(delete(Service).where(Service.organization_id == org_id))
        await self.session.execute(
            delete(ServiceSubmission).where(ServiceSubmission.organization_id == org_id)
        )
        result = await self.session.execute(
            delete(Organization).where(Organization.id == org_id)
        )
        return result.rowcount > 0


class ServiceRepository:
    """Repository for live services."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Service:
        service = Service(**kwargs)
        self.session.add(service)
        await self.session.flush()
        return service

    async def get(self, service_id: UUID) -> Service | None:
        query = (
            select(Service)
            .where(Service.id == service_id)
            .options(selectinload(Service.organization))
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: str | None = None,
        owner_id: UUID | None = None,
    ) -> list[Service]:
        query = select(Service)
        if owner_id:
            query = query.join(Organization, Service.organization_id == Organization.id).where(
                Organization.owner_user_id == owner_id
            )
        if status:
            query = query.where(Service.status == status)
        query = query.order_by(Service.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def next_position(self, org_id: UUID) -> int:
        result = await self.session.execute(
            select(func.max(Service.position)).where(Service.organization_id == org_id)
        )
        current = result.scalar()
        return 0 if current is None else current + 1

    async def delete(self, service_id: UUID) -> bool:
        result = await self.session.execute(delete(Service).where(Service.id == service_id))
        return result.rowcount > 0


class ServiceSubmissionRepository:
    """Repository for the service review queue."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> ServiceSubmission:
        submission = ServiceSubmission(**kwargs)
        self.session.add(submission)
        await self.session.flush()
        return submission

    async def get(self, submission_id: UUID, *, for_update: bool = False) -> ServiceSubmission | None:
        query = select(ServiceSubmission).where(ServiceSubmission.id == submission_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: str | None = None,
        owner_id: UUID | None = None,
    ) -> list[ServiceSubmission]:
        query = select(ServiceSubmission)
        if status:
            query = query.where(ServiceSubmission.status == status)
        if owner_id:
            query = query.where(ServiceSubmission.owner_user_id == owner_id)
        query = query.order_by(ServiceSubmission.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, status: str | None = None) -> int:
        query = select(func.count()).select_from(ServiceSubmission)
        if status:
            query = query.where(ServiceSubmission.status == status)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def delete(self, submission_id: UUID) -> bool:
        result = await self.session.execute(
            delete(ServiceSubmission).where(ServiceSubmission.id == submission_id)
        )
        return result.rowcount > 0
