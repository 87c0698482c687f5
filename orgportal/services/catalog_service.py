"""Service layer for live services and the service submission queue."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.database import atomic
from orgportal.exceptions import NotFoundError, ValidationError
from orgportal.guards import require_admin, require_live_editable, require_view
from orgportal.logging_config import get_logger
from orgportal.models import Service, ServiceSubmission
from orgportal.repository import (
    OrganizationRepository,
    ServiceRepository,
    ServiceSubmissionRepository,
)
from orgportal.schemas import ServiceDraft
from orgportal.services.event_service import publish_pending_counts
from orgportal.services.notification_service import notify_status_change
from orgportal.services.promotion_service import PromotionService
from orgportal.state_machine import APPROVED, PENDING, parse_status, transition

logger = get_logger(__name__)


class CatalogService:
    """Handles live services and service submissions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.org_repo = OrganizationRepository(session)
        self.service_repo = ServiceRepository(session)
        self.submission_repo = ServiceSubmissionRepository(session)
        self.promotion = PromotionService(session)

    # ==========================================
    # LIVE SERVICES
    # ==========================================

    async def list_for_user(self, actor: Any) -> list[Service]:
        return await self.service_repo.list(owner_id=actor.id)

    async def list_all(self, actor: Any, status: str | None = None) -> list[Service]:
        require_admin(actor, "list all services")
        return await self.service_repo.list(status=parse_status(status) if status else None)

    async def list_for_organization(self, actor: Any, org_id: UUID) -> list[Service]:
        org = await self.org_repo.get(org_id)
        if org is None:
            raise NotFoundError("Organization", org_id)
        require_view(actor, org)
        return list(org.services)

    async def get(self, actor: Any, service_id: UUID) -> Service:
        service = await self.service_repo.get(service_id)
        if service is None:
            raise NotFoundError("Service", service_id)
        require_view(actor, service.organization)
        return service

    async def update(self, actor: Any, service_id: UUID, draft: ServiceDraft) -> Service:
        """Owner edit of a service while its organization is still pending."""
        async with atomic(self.session):
            service = await self.service_repo.get(service_id)
            if service is None:
                raise NotFoundError("Service", service_id)
            require_live_editable(actor, service.organization)

            for name, value in draft.model_dump().items():
                setattr(service, name, value)
            service.updated_at = datetime.now(timezone.utc)

        logger.info("service_updated", service_id=str(service_id), actor_id=str(actor.id))
        return service

    async def update_status(
        self,
        actor: Any,
        service_id: UUID,
        status: str,
        *,
        observed: str | None = None,
    ) -> Service:
        require_admin(actor, "change service status")
        target = parse_status(status)

        async with atomic(self.session):
            service = await self.service_repo.get(service_id)
            if service is None:
                raise NotFoundError("Service", service_id)
            previous = transition(service, target, observed=observed)
            await notify_status_change(
                self.session,
                owner_id=service.organization.owner_user_id,
                kind="service",
                entity_id=service.id,
                name=service.service_name,
                previous=previous,
                current=target,
            )

        logger.info(
            "service_status_changed",
            service_id=str(service_id),
            previous=previous,
            status=target,
            actor_id=str(actor.id),
        )
        return service

    async def delete(self, actor: Any, service_id: UUID) -> None:
        require_admin(actor, "delete services")
        async with atomic(self.session):
            if not await self.service_repo.delete(service_id):
                raise NotFoundError("Service", service_id)

        logger.info("service_deleted", service_id=str(service_id), actor_id=str(actor.id))

    # ==========================================
    # SUBMISSIONS
    # ==========================================

    async def create_submission(
        self,
        actor: Any,
        org_id: UUID,
        draft: ServiceDraft,
    ) -> ServiceSubmission:
        """Queue a new service for review under an approved organization."""
        async with atomic(self.session):
            org = await self.org_repo.get(org_id)
            if org is None:
                raise NotFoundError("Organization", org_id)
            if org.status != APPROVED:
                raise ValidationError(
                    "Services can only be added to approved organizations",
                    field="organization_id",
                )
            submission = await self.submission_repo.create(
                organization_id=org.id,
                owner_user_id=actor.id,
                status=PENDING,
                **draft.model_dump(),
            )

        logger.info(
            "service_submission_created",
            submission_id=str(submission.id),
            organization_id=str(org_id),
            owner_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
        return submission

    async def list_submissions(self, actor: Any, status: str | None = None) -> list[ServiceSubmission]:
        """Admin review queue; defaults to pending submissions."""
        require_admin(actor, "list service submissions")
        return await self.submission_repo.list(status=parse_status(status or PENDING))

    async def list_submissions_for_user(self, actor: Any) -> list[ServiceSubmission]:
        return await self.submission_repo.list(owner_id=actor.id)

    async def review_submission(
        self,
        actor: Any,
        submission_id: UUID,
        status: str,
        *,
        comments: str | None = None,
        action: str | None = None,
        observed: str | None = None,
    ) -> ServiceSubmission | Service:
        return await self.promotion.review_service_submission(
            submission_id,
            status,
            actor,
            comments=comments,
            action=action,
            observed=observed,
        )

    async def submit_submission(self, actor: Any, submission_id: UUID) -> Service:
        return await self.promotion.submit_service_for_approval(submission_id, actor)

    async def delete_submission(self, actor: Any, submission_id: UUID) -> None:
        await self.promotion.delete_service_submission(submission_id, actor)
