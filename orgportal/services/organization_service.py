"""Service layer for live organizations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.database import atomic
from orgportal.exceptions import NotFoundError
from orgportal.guards import require_admin, require_live_editable, require_view
from orgportal.logging_config import get_logger
from orgportal.models import Organization, Service
from orgportal.repository import OrganizationRepository
from orgportal.schemas import OrganizationCreate, OrganizationUpdate
from orgportal.services.pending_organization_service import (
    apply_organization_fields,
    organization_fields,
    service_drafts,
)
from orgportal.services.promotion_service import PromotionService
from orgportal.state_machine import PENDING, parse_status

logger = get_logger(__name__)


class OrganizationService:
    """Reads, owner edits and admin moderation of published organizations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = OrganizationRepository(session)
        self.promotion = PromotionService(session)

    async def create(self, actor: Any, payload: OrganizationCreate) -> Organization:
        """Create a live organization directly in pending status (legacy path)."""
        async with atomic(self.session):
            org = await self.repo.create(
                services=[{**s, "status": PENDING} for s in service_drafts(payload)],
                status=PENDING,
                owner_user_id=actor.id,
                **organization_fields(payload),
            )

        logger.info(
            "organization_created_directly",
            organization_id=str(org.id),
            owner_id=str(actor.id),
            service_count=len(org.services),
        )
        return org

    async def list_all(self, actor: Any, status: str | None = None) -> list[Organization]:
        require_admin(actor, "list all organizations")
        return await self.repo.list(status=parse_status(status) if status else None)

    async def list_for_user(self, actor: Any) -> list[Organization]:
        return await self.repo.list(owner_id=actor.id)

    async def get(self, actor: Any, org_id: UUID) -> Organization:
        org = await self.repo.get(org_id)
        if org is None:
            raise NotFoundError("Organization", org_id)
        require_view(actor, org)
        return org

    async def update(self, actor: Any, org_id: UUID, payload: OrganizationUpdate) -> Organization:
        async with atomic(self.session):
            org = await self.repo.get(org_id, for_update=True)
            if org is None:
                raise NotFoundError("Organization", org_id)
            require_live_editable(actor, org)

            if not payload.services_only:
                apply_organization_fields(org, payload)
            if payload.services is not None:
                org.services = [
                    Service(position=i, status=PENDING, **draft)
                    for i, draft in enumerate(service_drafts(payload))
                ]
            org.updated_at = datetime.now(timezone.utc)
            await self.session.flush()

        logger.info(
            "organization_updated",
            organization_id=str(org_id),
            services_only=payload.services_only,
            actor_id=str(actor.id),
        )
        return org

    async def update_status(
        self,
        actor: Any,
        org_id: UUID,
        status: str,
        *,
        observed: str | None = None,
    ) -> Organization:
        return await self.promotion.update_organization_status(
            org_id, status, actor, observed=observed
        )

    async def delete(self, actor: Any, org_id: UUID) -> None:
        """Delete a live organization together with its services."""
        require_admin(actor, "delete organizations")
        async with atomic(self.session):
            if not await self.repo.delete(org_id):
                raise NotFoundError("Organization", org_id)

        logger.info("organization_deleted", organization_id=str(org_id), actor_id=str(actor.id))

    async def get_for_documents(self, actor: Any, org_id: UUID) -> Organization:
        require_admin(actor, "regenerate documents")
        org = await self.repo.get(org_id)
        if org is None:
            raise NotFoundError("Organization", org_id)
        return org
