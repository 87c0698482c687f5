"""Notification endpoints for the signed-in user's inbox."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.auth import get_current_user
from orgportal.database import get_db
from orgportal.models import User
from orgportal.schemas import (
    NotificationListResponse,
    NotificationResponse,
    NotificationUnreadCountResponse,
)
from orgportal.services import notification_service

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Newest first. ``unread_count`` ignores the ``unread_only`` filter."""
    rows, total = await notification_service.list_for_user(
        db, user.id, unread_only=unread_only, page=page, per_page=per_page
    )
    return NotificationListResponse(
        items=[NotificationResponse.from_model(n) for n in rows],
        total=total,
        unread_count=await notification_service.count_unread(db, user.id),
    )


@router.get("/unread-count", response_model=NotificationUnreadCountResponse)
async def get_unread_count(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    count = await notification_service.count_unread(db, user.id)
    return NotificationUnreadCountResponse(unread_count=count)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notif = await notification_service.mark_read(db, notification_id, user.id)
    return NotificationResponse.from_model(notif)


@router.post("/read-all", response_model=NotificationUnreadCountResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await notification_service.mark_all_read(db, user.id)
    return NotificationUnreadCountResponse(unread_count=0)
