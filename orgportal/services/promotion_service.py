"""Promotion engine — moves staged rows into the live tables atomically.

Every operation here lock-loads its staging row inside the transaction that
deletes it, so of two concurrent promote/delete calls the first commit wins
and the loser sees ``NotFoundError``.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.database import atomic
from orgportal.exceptions import NotFoundError, StatusConflictError
from orgportal.guards import (
    is_owner,
    require_admin,
    require_owner_or_admin,
    require_submission_deletable,
    require_submission_submittable,
)
from orgportal.logging_config import get_logger
from orgportal.models import (
    ORGANIZATION_BUSINESS_FIELDS,
    SERVICE_BUSINESS_FIELDS,
    Organization,
    Service,
    ServiceSubmission,
)
from orgportal.repository import (
    OrganizationRepository,
    PendingOrganizationRepository,
    ServiceRepository,
    ServiceSubmissionRepository,
)
from orgportal.services.event_service import publish_pending_counts
from orgportal.services.notification_service import (
    notify_organization_promoted,
    notify_service_published,
    notify_status_change,
)
from orgportal.state_machine import APPROVED, is_promotion, parse_status, transition

logger = get_logger(__name__)


def _check_observed(observed: str | None, current: str) -> None:
    if observed is not None and parse_status(observed) != current:
        raise StatusConflictError(observed, current)


def _service_fields(row: Any) -> dict[str, Any]:
    return {name: getattr(row, name) for name in SERVICE_BUSINESS_FIELDS}


class PromotionService:
    """Copy-then-delete moves from staging to live, plus staged deletions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.pending_repo = PendingOrganizationRepository(session)
        self.org_repo = OrganizationRepository(session)
        self.service_repo = ServiceRepository(session)
        self.submission_repo = ServiceSubmissionRepository(session)

    # ==========================================
    # ORGANIZATIONS
    # ==========================================

    async def promote_organization(
        self,
        pending_id: UUID,
        actor: Any,
        *,
        observed: str | None = None,
    ) -> Organization:
        """Publish a pending organization and its services as approved live rows."""
        require_admin(actor, "approve organizations")

        async with atomic(self.session):
            pending = await self.pending_repo.get(pending_id, for_update=True)
            if pending is None:
                raise NotFoundError("PendingOrganization", pending_id)
            _check_observed(observed, pending.status)

            org = await self.org_repo.create(
                services=[
                    {**_service_fields(s), "status": APPROVED} for s in pending.services
                ],
                status=APPROVED,
                owner_user_id=pending.owner_user_id,
                **{name: getattr(pending, name) for name in ORGANIZATION_BUSINESS_FIELDS},
            )
            if not await self.pending_repo.delete(pending.id):
                raise NotFoundError("PendingOrganization", pending_id)

            await notify_organization_promoted(
                self.session,
                owner_id=org.owner_user_id,
                pending_id=pending_id,
                organization_id=org.id,
                name=org.institution_name,
            )

        logger.info(
            "organization_promoted",
            pending_id=str(pending_id),
            organization_id=str(org.id),
            service_count=len(org.services),
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
        return org

    async def delete_pending_organization(self, pending_id: UUID, actor: Any) -> None:
        async with atomic(self.session):
            pending = await self.pending_repo.get(pending_id, for_update=True)
            if pending is None:
                raise NotFoundError("PendingOrganization", pending_id)
            require_owner_or_admin(actor, pending, "delete this organization")

            if not await self.pending_repo.delete(pending_id):
                raise NotFoundError("PendingOrganization", pending_id)

        logger.info(
            "pending_organization_deleted",
            pending_id=str(pending_id),
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)

    async def update_organization_status(
        self,
        org_id: UUID,
        new_status: str,
        actor: Any,
        *,
        observed: str | None = None,
    ) -> Organization:
        """Admin-only status flip on a live organization; nothing else changes."""
        require_admin(actor, "change organization status")
        target = parse_status(new_status)

        async with atomic(self.session):
            org = await self.org_repo.get(org_id, for_update=True)
            if org is None:
                raise NotFoundError("Organization", org_id)
            previous = transition(org, target, observed=observed)
            await notify_status_change(
                self.session,
                owner_id=org.owner_user_id,
                kind="organization",
                entity_id=org.id,
                name=org.institution_name,
                previous=previous,
                current=target,
            )

        logger.info(
            "organization_status_changed",
            organization_id=str(org_id),
            previous=previous,
            status=target,
            actor_id=str(actor.id),
        )
        return org

    # ==========================================
    # SERVICE SUBMISSIONS
    # ==========================================

    async def _publish_submission(self, submission: ServiceSubmission, actor: Any) -> Service:
        service = await self.service_repo.create(
            organization_id=submission.organization_id,
            position=await self.service_repo.next_position(submission.organization_id),
            status=APPROVED,
            **_service_fields(submission),
        )
        if not await self.submission_repo.delete(submission.id):
            raise NotFoundError("ServiceSubmission", submission.id)

        if not is_owner(actor, submission):
            await notify_service_published(
                self.session,
                owner_id=submission.owner_user_id,
                submission_id=submission.id,
                service_id=service.id,
                organization_id=submission.organization_id,
                name=submission.service_name,
            )
        return service

    async def submit_service_for_approval(self, submission_id: UUID, actor: Any) -> Service:
        """Publish a submission as a live approved service under its organization."""
        async with atomic(self.session):
            submission = await self.submission_repo.get(submission_id, for_update=True)
            if submission is None:
                raise NotFoundError("ServiceSubmission", submission_id)
            require_submission_submittable(actor, submission)
            service = await self._publish_submission(submission, actor)

        logger.info(
            "service_submission_promoted",
            submission_id=str(submission_id),
            service_id=str(service.id),
            organization_id=str(service.organization_id),
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
        return service

    async def review_service_submission(
        self,
        submission_id: UUID,
        status: str,
        actor: Any,
        *,
        comments: str | None = None,
        action: str | None = None,
        observed: str | None = None,
    ) -> ServiceSubmission | Service:
        """
        Admin review of a queued submission.

        ``approved`` with the ``move`` action publishes the service and returns
        the new live Service; anything else updates the submission in place
        and returns it.
        """
        require_admin(actor, "review service submissions")
        target = parse_status(status)

        async with atomic(self.session):
            submission = await self.submission_repo.get(submission_id, for_update=True)
            if submission is None:
                raise NotFoundError("ServiceSubmission", submission_id)

            if is_promotion(target, action):
                _check_observed(observed, submission.status)
                previous = submission.status
                result: ServiceSubmission | Service = await self._publish_submission(
                    submission, actor
                )
            else:
                previous = transition(submission, target, observed=observed)
                submission.reviewer_id = actor.id
                submission.reviewer_comments = comments
                await notify_status_change(
                    self.session,
                    owner_id=submission.owner_user_id,
                    kind="service_submission",
                    entity_id=submission.id,
                    name=submission.service_name,
                    previous=previous,
                    current=target,
                    comments=comments,
                )
                result = submission

        logger.info(
            "service_submission_reviewed",
            submission_id=str(submission_id),
            previous=previous,
            status=target,
            promoted=isinstance(result, Service),
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
        return result

    async def delete_service_submission(self, submission_id: UUID, actor: Any) -> None:
        async with atomic(self.session):
            submission = await self.submission_repo.get(submission_id, for_update=True)
            if submission is None:
                raise NotFoundError("ServiceSubmission", submission_id)
            require_submission_deletable(actor, submission)

            if not await self.submission_repo.delete(submission_id):
                raise NotFoundError("ServiceSubmission", submission_id)

        logger.info(
            "service_submission_deleted",
            submission_id=str(submission_id),
            actor_id=str(actor.id),
        )
        await publish_pending_counts(self.session)
