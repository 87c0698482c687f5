"""Error taxonomy for the organization portal.

Every error carries an ``error_type`` that is returned to clients as the
``error`` field of the response envelope.
"""

from typing import Any

from fastapi import status


class PortalError(Exception):
    """Base exception for portal errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error_type: str = "portal_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class NotFoundError(PortalError):
    """Raised when an entity id does not exist, including already promoted or deleted rows."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} '{entity_id}' not found", "not_found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ForbiddenError(PortalError):
    """Raised on an ownership or role violation."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str):
        super().__init__(message, "forbidden")


class InvalidStatusError(PortalError):
    """Raised when a status value is outside pending/approved/rejected."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid status '{value}'. Must be one of: pending, approved, rejected",
            "invalid_status",
        )
        self.value = value


class StatusConflictError(PortalError):
    """Raised when the status observed by the caller is no longer current."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, observed: str, current: str):
        super().__init__(
            f"Status changed concurrently: expected '{observed}', found '{current}'",
            "status_conflict",
        )
        self.observed = observed
        self.current = current


class ValidationError(PortalError):
    """Raised on a missing required field or a malformed payload."""

    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "validation_error")
        self.field = field


class StorageUnavailableError(PortalError):
    """Raised when the document generator or blob store fails.

    Callers downgrade this to a warning; it never rolls back the primary write.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str, stage: str):
        super().__init__(message, "storage_unavailable")
        self.stage = stage


def error_body(message: str, error_type: str) -> dict[str, Any]:
    """The JSON envelope returned for every failed request."""
    return {"success": False, "message": message, "error": error_type}
