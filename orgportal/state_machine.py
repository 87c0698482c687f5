"""Status machine for organizations, services and their staging rows.

All three states are mutually reachable: approvals are reversible, so there
is no terminal state.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from orgportal.exceptions import InvalidStatusError, StatusConflictError

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

STATUSES: tuple[str, ...] = (PENDING, APPROVED, REJECTED)

# Map of current_status -> list of (target_status, trigger_reason)
VALID_TRANSITIONS: dict[str, list[tuple[str, str]]] = {
    PENDING: [
        (APPROVED, "review_approved"),
        (REJECTED, "review_rejected"),
    ],
    APPROVED: [
        (PENDING, "reopened"),
        (REJECTED, "approval_revoked"),
    ],
    REJECTED: [
        (PENDING, "reopened"),
        (APPROVED, "rejection_overturned"),
    ],
}

# Action that turns "approve a staged row" into a promotion.
MOVE_ACTION = "move"


def parse_status(value: Any) -> str:
    """Normalise a client-supplied status, raising InvalidStatusError if unknown."""
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in STATUSES:
            return normalised
    raise InvalidStatusError(value)


def can_transition(current: str, target: str) -> bool:
    """Check whether a transition from current to target is valid.

    Re-entering the current state is allowed and treated as a no-op.
    """
    if current not in STATUSES or target not in STATUSES:
        return False
    if current == target:
        return True
    return any(t == target for t, _ in VALID_TRANSITIONS[current])


def validate_transition(current: str, target: str) -> None:
    """Validate a state transition, raising InvalidStatusError if invalid."""
    if not can_transition(current, target):
        raise InvalidStatusError(target)


def trigger_for(current: str, target: str) -> str:
    """Name of the event that a transition represents, for logs and notifications."""
    for t, trigger in VALID_TRANSITIONS.get(current, []):
        if t == target:
            return trigger
    return "status_reaffirmed"


def transition(entity: Any, target: Any, *, observed: str | None = None) -> str:
    """Move ``entity`` to ``target`` in place and return the previous status.

    Only ``status`` and ``updated_at`` are touched. When ``observed`` is given
    it must still match the entity's current status.
    """
    target_status = parse_status(target)
    current = entity.status
    if observed is not None and parse_status(observed) != current:
        raise StatusConflictError(observed, current)
    validate_transition(current, target_status)

    entity.status = target_status
    entity.updated_at = datetime.now(timezone.utc)
    return current


def is_promotion(target: str, action: str | None) -> bool:
    """Whether a staged row's status change must go through the promotion engine."""
    return target == APPROVED and action == MOVE_ACTION
