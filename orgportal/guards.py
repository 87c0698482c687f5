"""Ownership and role checks.

Every check raises ``ForbiddenError`` before any write happens. Actors are
duck-typed: anything with ``id`` and ``role`` works, so unit tests can pass
plain namespaces instead of ORM users.
"""

from typing import Any

from orgportal.exceptions import ForbiddenError
from orgportal.state_machine import PENDING, REJECTED

ADMIN_ROLE = "admin"


def is_admin(actor: Any) -> bool:
    return getattr(actor, "role", None) == ADMIN_ROLE


def is_owner(actor: Any, entity: Any) -> bool:
    return entity.owner_user_id == actor.id


def require_admin(actor: Any, action: str = "perform this action") -> None:
    if not is_admin(actor):
        raise ForbiddenError(f"Only an admin may {action}")


def require_owner_or_admin(actor: Any, entity: Any, action: str = "access this record") -> None:
    if not (is_admin(actor) or is_owner(actor, entity)):
        raise ForbiddenError(f"You are not allowed to {action}")


def require_view(actor: Any, entity: Any) -> None:
    """Owners read their own rows; admins read everything."""
    require_owner_or_admin(actor, entity, "view this record")


def require_staged_editable(actor: Any, staged: Any) -> None:
    """A staged organization may be edited by its owner or an admin while pending."""
    require_owner_or_admin(actor, staged, "edit this organization")
    if staged.status != PENDING:
        raise ForbiddenError(
            f"Only pending organizations can be edited (current status: {staged.status})"
        )


def require_live_editable(actor: Any, org: Any) -> None:
    """A live organization may be edited only by its owner and only while pending."""
    if not is_owner(actor, org):
        raise ForbiddenError("Only the owner may edit this organization")
    if org.status != PENDING:
        raise ForbiddenError(
            f"Only pending organizations can be edited (current status: {org.status})"
        )


def require_submission_submittable(actor: Any, submission: Any) -> None:
    require_owner_or_admin(actor, submission, "submit this service")
    if submission.status == REJECTED:
        raise ForbiddenError("A rejected submission cannot be submitted")


def require_submission_deletable(actor: Any, submission: Any) -> None:
    """Owners may withdraw their own submission while it is still pending."""
    if is_admin(actor):
        return
    if not is_owner(actor, submission):
        raise ForbiddenError("You are not allowed to delete this submission")
    if submission.status != PENDING:
        raise ForbiddenError(
            f"Only pending submissions can be deleted (current status: {submission.status})"
        )
