"""Notification service — tells owners when an admin acts on their records."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.database import atomic
from orgportal.exceptions import ForbiddenError, NotFoundError
from orgportal.logging_config import get_logger
from orgportal.models import Notification
from orgportal.state_machine import trigger_for

logger = get_logger(__name__)

_KIND_LABELS = {
    "pending_organization": "organization registration",
    "organization": "organization",
    "service": "service",
    "service_submission": "service submission",
}


async def create_notification(
    db: AsyncSession,
    user_id: UUID,
    notification_type: str,
    title: str,
    body: str,
    link: str | None = None,
    metadata: dict | None = None,
) -> Notification:
    """Insert a single notification. The caller's transaction commits it."""
    notif = Notification(
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        body=body,
        link=link,
        metadata_=metadata or {},
    )
    db.add(notif)
    return notif


async def notify_status_change(
    db: AsyncSession,
    owner_id: UUID,
    kind: str,
    entity_id: UUID,
    name: str,
    previous: str,
    current: str,
    comments: str | None = None,
) -> Notification | None:
    """Notify the owner of a status change. Re-entering the same status is silent."""
    if previous == current:
        return None
    label = _KIND_LABELS.get(kind, kind)
    body = f"Your {label} \"{name}\" is now {current} (was {previous})."
    if comments:
        body = f"{body} Reviewer comments: {comments}"
    notif = await create_notification(
        db,
        user_id=owner_id,
        notification_type=f"{kind}_{current}",
        title=f"{label.capitalize()} {current}",
        body=body,
        metadata={
            "entity_id": str(entity_id),
            "previous": previous,
            "status": current,
            "trigger": trigger_for(previous, current),
        },
    )
    logger.info(
        "status_change_notified",
        owner_id=str(owner_id),
        kind=kind,
        entity_id=str(entity_id),
        status=current,
    )
    return notif


async def notify_organization_promoted(
    db: AsyncSession,
    owner_id: UUID,
    pending_id: UUID,
    organization_id: UUID,
    name: str,
) -> Notification:
    """Notify the owner that their registration was approved and published."""
    return await create_notification(
        db,
        user_id=owner_id,
        notification_type="organization_approved",
        title="Organization approved",
        body=f"Your organization \"{name}\" has been approved and published.",
        link=f"/organizations/{organization_id}",
        metadata={"pending_id": str(pending_id), "organization_id": str(organization_id)},
    )


async def notify_service_published(
    db: AsyncSession,
    owner_id: UUID,
    submission_id: UUID,
    service_id: UUID,
    organization_id: UUID,
    name: str,
) -> Notification:
    """Notify the submitter that their service is now live."""
    return await create_notification(
        db,
        user_id=owner_id,
        notification_type="service_approved",
        title="Service approved",
        body=f"Your service \"{name}\" has been approved and published.",
        link=f"/organizations/{organization_id}",
        metadata={"submission_id": str(submission_id), "service_id": str(service_id)},
    )


# ==========================================
# INBOX
# ==========================================


def _inbox(user_id: UUID, unread_only: bool = False):
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.read_at.is_(None))
    return query


async def count_unread(db: AsyncSession, user_id: UUID) -> int:
    query = select(func.count()).select_from(_inbox(user_id, unread_only=True).subquery())
    return (await db.execute(query)).scalar() or 0


async def list_for_user(
    db: AsyncSession,
    user_id: UUID,
    *,
    unread_only: bool = False,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Notification], int]:
    """One page of a user's notifications, newest first, plus the filtered total."""
    inbox = _inbox(user_id, unread_only)
    total = (await db.execute(select(func.count()).select_from(inbox.subquery()))).scalar() or 0
    rows = await db.execute(
        inbox.order_by(Notification.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(rows.scalars().all()), total


async def mark_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> Notification:
    notif = await db.get(Notification, notification_id)
    if notif is None:
        raise NotFoundError("Notification", notification_id)
    if notif.user_id != user_id:
        raise ForbiddenError("Not your notification")

    if notif.read_at is None:
        async with atomic(db):
            notif.read_at = datetime.now(timezone.utc)
    return notif


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    """Returns how many notifications were marked."""
    async with atomic(db):
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read_at.is_(None))
            .values(read_at=datetime.now(timezone.utc))
        )
    logger.debug("notifications_marked_read", user_id=str(user_id), count=result.rowcount)
    return result.rowcount
