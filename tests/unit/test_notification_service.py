"""Tests for owner notifications."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from orgportal.exceptions import ForbiddenError, NotFoundError
from orgportal.services.notification_service import mark_read, notify_status_change


class TestNotifyStatusChange:
    @pytest.mark.asyncio
    async def test_records_transition(self, db_session):
        owner_id, entity_id = uuid4(), uuid4()

        notif = await notify_status_change(
            db_session,
            owner_id=owner_id,
            kind="service_submission",
            entity_id=entity_id,
            name="Trade licence",
            previous="pending",
            current="rejected",
            comments="Missing fee schedule",
        )

        db_session.add.assert_called_once_with(notif)
        assert notif.user_id == owner_id
        assert notif.notification_type == "service_submission_rejected"
        assert notif.title == "Service submission rejected"
        assert "Missing fee schedule" in notif.body
        assert notif.metadata_ == {
            "entity_id": str(entity_id),
            "previous": "pending",
            "status": "rejected",
            "trigger": "review_rejected",
        }

    @pytest.mark.asyncio
    async def test_same_status_is_silent(self, db_session):
        notif = await notify_status_change(
            db_session,
            owner_id=uuid4(),
            kind="organization",
            entity_id=uuid4(),
            name="Galle MC",
            previous="approved",
            current="approved",
        )

        assert notif is None
        db_session.add.assert_not_called()


class TestMarkRead:
    @pytest.mark.asyncio
    async def test_missing(self, db_session):
        db_session.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await mark_read(db_session, uuid4(), uuid4())

    @pytest.mark.asyncio
    async def test_other_users_notification(self, db_session):
        db_session.get = AsyncMock(return_value=AsyncMock(user_id=uuid4(), read_at=None))

        with pytest.raises(ForbiddenError):
            await mark_read(db_session, uuid4(), uuid4())

        db_session.commit.assert_not_awaited()
