"""Promotion engine against a real session."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from orgportal.exceptions import NotFoundError
from orgportal.models import (
    Notification,
    Organization,
    PendingOrganization,
    PendingService,
    Service,
    ServiceSubmission,
)
from orgportal.repository import PendingOrganizationRepository
from orgportal.services.promotion_service import PromotionService


async def _count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


async def _stage(session, owner, n_services=2) -> PendingOrganization:
    pending = await PendingOrganizationRepository(session).create(
        services=[
            {"service_name": f"Service {i}", "category": "General"}
            for i in range(n_services)
        ],
        status="pending",
        owner_user_id=owner.id,
        province="Southern",
        district="Galle",
        institution_name="Galle Municipal Council",
        website_url=None,
        contact_name="C. Fernando",
        contact_designation="Mayor",
        contact_email="mayor@galle.example.gov",
        contact_number="0912222222",
        organization_logo=None,
        profile_image=None,
    )
    await session.commit()
    return pending


class TestPromotionEngine:
    @pytest.mark.asyncio
    async def test_promotion_moves_rows(self, session_factory, owner, admin):
        async with session_factory() as session:
            pending = await _stage(session, owner, n_services=3)
            pending_id = pending.id

        async with session_factory() as session:
            org = await PromotionService(session).promote_organization(pending_id, admin)
            assert len(org.services) == 3

        async with session_factory() as session:
            assert await _count(session, PendingOrganization) == 0
            assert await _count(session, Organization) == 1
            assert await _count(session, Service) == 3
            assert await _count(session, Notification) == 1

    @pytest.mark.asyncio
    async def test_zero_services(self, session_factory, owner, admin):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner, n_services=0)).id

        async with session_factory() as session:
            org = await PromotionService(session).promote_organization(pending_id, admin)

        assert org.services == []

    @pytest.mark.asyncio
    async def test_failed_promotion_changes_nothing(self, session_factory, admin):
        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                await PromotionService(session).promote_organization(uuid4(), admin)

        async with session_factory() as session:
            assert await _count(session, Organization) == 0
            assert await _count(session, Notification) == 0

    @pytest.mark.asyncio
    async def test_second_promotion_loses(self, session_factory, owner, admin):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner)).id

        async with session_factory() as first:
            await PromotionService(first).promote_organization(pending_id, admin)
        async with session_factory() as second:
            with pytest.raises(NotFoundError):
                await PromotionService(second).promote_organization(pending_id, admin)

        async with session_factory() as session:
            assert await _count(session, Organization) == 1

    @pytest.mark.asyncio
    async def test_delete_removes_staged_services(self, session_factory, owner):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner)).id

        async with session_factory() as session:
            await PromotionService(session).delete_pending_organization(pending_id, owner)

        async with session_factory() as session:
            assert await _count(session, PendingOrganization) == 0
            assert await _count(session, PendingService) == 0
            assert await PendingOrganizationRepository(session).get(pending_id) is None

    @pytest.mark.asyncio
    async def test_promotion_after_delete_loses(self, session_factory, owner, admin):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner)).id
        async with session_factory() as session:
            await PromotionService(session).delete_pending_organization(pending_id, owner)

        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                await PromotionService(session).promote_organization(pending_id, admin)

        async with session_factory() as session:
            assert await _count(session, Organization) == 0
            assert await _count(session, Service) == 0
            assert await _count(session, PendingOrganization) == 0

    @pytest.mark.asyncio
    async def test_replace_staged_services(self, session_factory, owner):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner, n_services=3)).id

        async with session_factory() as session:
            repo = PendingOrganizationRepository(session)
            org = await repo.get(pending_id)
            repo.replace_services(org, [{"service_name": "Land permit", "category": "Land"}])
            await session.commit()

        async with session_factory() as session:
            org = await PendingOrganizationRepository(session).get(pending_id)
            assert [(s.position, s.service_name) for s in org.services] == [(0, "Land permit")]
            assert await _count(session, PendingService) == 1

    @pytest.mark.asyncio
    async def test_submission_round_trip(self, session_factory, owner, admin):
        async with session_factory() as session:
            pending_id = (await _stage(session, owner, n_services=1)).id
        async with session_factory() as session:
            org = await PromotionService(session).promote_organization(pending_id, admin)
            submission = ServiceSubmission(
                organization_id=org.id,
                owner_user_id=owner.id,
                service_name="Trade licence",
                category="Licensing",
                status="pending",
            )
            session.add(submission)
            await session.commit()
            submission_id = submission.id

        async with session_factory() as session:
            service = await PromotionService(session).submit_service_for_approval(
                submission_id, owner
            )

        assert service.position == 1
        async with session_factory() as session:
            assert await _count(session, ServiceSubmission) == 0
            assert await _count(session, Service) == 2
