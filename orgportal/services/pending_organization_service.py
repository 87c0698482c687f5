"""Service layer for staged organization registrations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.database import atomic
from orgportal.exceptions import NotFoundError
from orgportal.guards import require_admin, require_staged_editable, require_view
from orgportal.logging_config import get_logger
from orgportal.models import Organization, PendingOrganization
from orgportal.repository import PendingOrganizationRepository
from orgportal.schemas import OrganizationCreate, OrganizationUpdate
from orgportal.services.event_service import publish_pending_counts
from orgportal.services.notification_service import notify_status_change
from orgportal.services.promotion_service import PromotionService
from orgportal.state_machine import PENDING, is_promotion, parse_status, transition

logger = get_logger(__name__)


def organization_fields(payload: OrganizationCreate | OrganizationUpdate) -> dict[str, Any]:
    """Flatten a request body into organization column values."""
    contact = payload.contact
    return {
        "province": payload.province,
        "district": payload.district,
        "institution_name": payload.institution_name,
        "website_url": payload.website_url,
        "contact_name": contact.name,
        "contact_designation": contact.designation,
        "contact_email": contact.email,
        "contact_number": contact.contact_number,
        "organization_logo": payload.organization_logo,
        "profile_image": payload.profile_image,
    }


# Omitting an image on update keeps the stored URL.
IMAGE_FIELDS = ("organization_logo", "profile_image")


def apply_organization_fields(
    org: Organization | PendingOrganization,
    payload: OrganizationUpdate,
) -> None:
    for name, value in organization_fields(payload).items():
        if value is None and name in IMAGE_FIELDS:
            continue
        setattr(org, name, value)


def service_drafts(payload: OrganizationCreate | OrganizationUpdate) -> list[dict[str, Any]]:
    return [draft.model_dump() for draft in payload.services or []]


class PendingOrganizationService:
    """Create, review and edit registrations before they are published."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = PendingOrganizationRepository(session)
        self.promotion = PromotionService(session)

    async def create(self, actor: Any, payload: OrganizationCreate) -> PendingOrganization:
        async with atomic(self.session):
            org = await self.repo.create(
                services=service_drafts(payload),
                status=PENDING,
                owner_user_id=actor.id,
                **organization_fields(payload),
            )

        logger.info(
            "pending_organization_created",
            pending_id=str(org.id),
            owner_id=str(actor.id),
            service_count=len(org.services),
        )
        await publish_pending_counts(self.session)
        return org

    async def list_all(self, actor: Any, status: str | None = None) -> list[PendingOrganization]:
        require_admin(actor, "list all pending organizations")
        return await self.repo.list(status=parse_status(status) if status else None)

    async def list_for_user(self, actor: Any) -> list[PendingOrganization]:
        return await self.repo.list(owner_id=actor.id)

    async def count(self, actor: Any, status: str = PENDING) -> int:
        require_admin(actor, "view pending counts")
        return await self.repo.count(parse_status(status))

    async def get(self, actor: Any, pending_id: UUID) -> PendingOrganization:
        org = await self.repo.get(pending_id)
        if org is None:
            raise NotFoundError("PendingOrganization", pending_id)
        require_view(actor, org)
        return org

    async def update(
        self,
        actor: Any,
        pending_id: UUID,
        payload: OrganizationUpdate,
    ) -> PendingOrganization:
        """Full update (fields and, optionally, services) or services-only update."""
        async with atomic(self.session):
            org = await self.repo.get(pending_id, for_update=True)
            if org is None:
                raise NotFoundError("PendingOrganization", pending_id)
            require_staged_editable(actor, org)

            if not payload.services_only:
                apply_organization_fields(org, payload)
            if payload.services is not None:
                self.repo.replace_services(org, service_drafts(payload))
            org.updated_at = datetime.now(timezone.utc)
            await self.session.flush()

        logger.info(
            "pending_organization_updated",
            pending_id=str(pending_id),
            services_only=payload.services_only,
            actor_id=str(actor.id),
        )
        return org

    async def update_status(
        self,
        actor: Any,
        pending_id: UUID,
        status: str,
        *,
        action: str | None = None,
        observed: str | None = None,
    ) -> PendingOrganization | Organization:
        """
        Transition a staged organization.

        ``approved`` with the ``move`` action promotes it and returns the new
        live Organization; every other transition updates it in place.
        """
        require_admin(actor, "change organization status")
        target = parse_status(status)
        if is_promotion(target, action):
            return await self.promotion.promote_organization(
                pending_id, actor, observed=observed
            )

        async with atomic(self.session):
            org = await self.repo.get(pending_id, for_update=True)
            if org is None:
                raise NotFoundError("PendingOrganization", pending_id)
            previous = transition(org, target, observed=observed)
            await notify_status_change(
                self.session,
                owner_id=org.owner_user_id,
                kind="pending_organization",
                entity_id=org.id,
                name=org.institution_name,
                previous=previous,
                current=target,
            )

        logger.info(
            "pending_organization_status_changed",
            pending_id=str(pending_id),
            previous=previous,
            status=target,
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
        return org

    async def delete(self, actor: Any, pending_id: UUID) -> None:
        await self.promotion.delete_pending_organization(pending_id, actor)
