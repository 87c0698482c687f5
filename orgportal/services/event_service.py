"""Pending-count events — publish review-queue sizes to Redis pub/sub."""

import json

from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.logging_config import get_logger
from orgportal.redis import get_redis_optional
from orgportal.repository import PendingOrganizationRepository, ServiceSubmissionRepository
from orgportal.state_machine import PENDING

logger = get_logger(__name__)

PENDING_COUNTS_CHANNEL = "portal:pending_counts"


async def get_pending_counts(db: AsyncSession) -> dict[str, int]:
    return {
        "pending_organizations": await PendingOrganizationRepository(db).count(PENDING),
        "service_submissions": await ServiceSubmissionRepository(db).count(PENDING),
    }


async def publish_pending_counts(db: AsyncSession, redis=None) -> dict[str, int] | None:
    """
    Publish the current pending counts after a commit.

    Best-effort: without Redis this is a no-op, and a failed publish is
    logged and dropped.

    Args:
        db: Database session, already committed
        redis: Redis connection (defaults to the shared one, if initialized)
    """
    if redis is None:
        redis = get_redis_optional()
    if redis is None:
        return None

    try:
        counts = await get_pending_counts(db)
        await redis.publish(PENDING_COUNTS_CHANNEL, json.dumps(counts))
    except Exception as e:
        logger.warning("pending_counts_publish_failed", channel=PENDING_COUNTS_CHANNEL, error=str(e))
        return None

    logger.debug("pending_counts_published", **counts)
    return counts
