"""Pending organization endpoints — registration, review and promotion."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.auth import get_current_user
from orgportal.database import get_db
from orgportal.models import Organization, User
from orgportal.schemas import (
    ActionResponse,
    CountResponse,
    ListResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    PendingOrganizationResponse,
    StatusUpdateRequest,
)
from orgportal.services.document_service import DocumentService, get_document_service
from orgportal.services.pending_organization_service import PendingOrganizationService
from orgportal.state_machine import PENDING

router = APIRouter(prefix="/api/pending-organizations", tags=["pending-organizations"])


@router.post("", status_code=201, response_model=ActionResponse[PendingOrganizationResponse])
async def create_pending_organization(
    body: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Submit a new organization with its services for admin review."""
    org = await PendingOrganizationService(db).create(user, body)
    return ActionResponse(
        message="Organization submitted for review",
        data=PendingOrganizationResponse.from_model(org),
    )


@router.get("", response_model=ListResponse[PendingOrganizationResponse])
async def list_pending_organizations(
    status: str | None = Query(None, description="pending, approved or rejected"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Admin listing of staged organizations, optionally filtered by status."""
    rows = await PendingOrganizationService(db).list_all(user, status)
    items = [PendingOrganizationResponse.from_model(o) for o in rows]
    return ListResponse(data=items, total=len(items))


@router.get("/user", response_model=ListResponse[PendingOrganizationResponse])
async def list_my_pending_organizations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await PendingOrganizationService(db).list_for_user(user)
    items = [PendingOrganizationResponse.from_model(o) for o in rows]
    return ListResponse(data=items, total=len(items))


@router.get("/count", response_model=CountResponse)
async def count_pending_organizations(
    status: str = Query(PENDING),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Number of staged organizations in a status (navbar badge)."""
    count = await PendingOrganizationService(db).count(user, status)
    return CountResponse(status=status.strip().lower(), count=count)


@router.get("/{pending_id}", response_model=PendingOrganizationResponse)
async def get_pending_organization(
    pending_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    org = await PendingOrganizationService(db).get(user, pending_id)
    return PendingOrganizationResponse.from_model(org)


@router.put("/{pending_id}", response_model=ActionResponse[PendingOrganizationResponse])
async def update_pending_organization(
    pending_id: UUID,
    body: OrganizationUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Edit a pending registration: every field, or only its services."""
    org = await PendingOrganizationService(db).update(user, pending_id, body)
    message = "Services updated" if body.services_only else "Organization updated"
    return ActionResponse(message=message, data=PendingOrganizationResponse.from_model(org))


@router.patch("/{pending_id}/status")
async def update_pending_organization_status(
    pending_id: UUID,
    body: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    documents: DocumentService | None = Depends(get_document_service),
):
    """
    Change a registration's status.

    ``{"status": "approved", "action": "move"}`` publishes it as a live
    organization and generates its documents; the response then carries the
    new organization.
    """
    result = await PendingOrganizationService(db).update_status(
        user,
        pending_id,
        body.status,
        action=body.action,
        observed=body.observed_status,
    )

    if isinstance(result, Organization):
        warnings = []
        if documents is not None:
            warnings = await documents.attach_best_effort(db, result)
        return ActionResponse[OrganizationResponse](
            message="Organization approved and published",
            data=OrganizationResponse.from_model(result),
            warnings=warnings,
        )

    return ActionResponse[PendingOrganizationResponse](
        message=f"Organization status updated to {result.status}",
        data=PendingOrganizationResponse.from_model(result),
    )


@router.delete("/{pending_id}", response_model=ActionResponse[dict])
async def delete_pending_organization(
    pending_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await PendingOrganizationService(db).delete(user, pending_id)
    return ActionResponse(message="Pending organization deleted", data={"id": str(pending_id)})
