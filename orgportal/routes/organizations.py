"""Live organization endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.auth import get_current_user
from orgportal.database import get_db
from orgportal.exceptions import StorageUnavailableError
from orgportal.models import User
from orgportal.schemas import (
    ActionResponse,
    ListResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    StatusUpdateRequest,
)
from orgportal.services.document_service import DocumentService, get_document_service
from orgportal.services.organization_service import OrganizationService

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.post(
    "",
    status_code=201,
    response_model=ActionResponse[OrganizationResponse],
    deprecated=True,
)
async def create_organization(
    body: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    documents: DocumentService | None = Depends(get_document_service),
):
    """Create a live organization in pending status.

    Kept for older clients; new registrations go through
    ``POST /api/pending-organizations``.
    """
    org = await OrganizationService(db).create(user, body)
    warnings = []
    if documents is not None:
        warnings = await documents.attach_best_effort(db, org)
    return ActionResponse(
        message="Organization created",
        data=OrganizationResponse.from_model(org),
        warnings=warnings,
    )


@router.get("", response_model=ListResponse[OrganizationResponse])
async def list_organizations(
    status: str | None = Query(None, description="pending, approved or rejected"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await OrganizationService(db).list_all(user, status)
    items = [OrganizationResponse.from_model(o) for o in rows]
    return ListResponse(data=items, total=len(items))


@router.get("/user", response_model=ListResponse[OrganizationResponse])
async def list_my_organizations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await OrganizationService(db).list_for_user(user)
    items = [OrganizationResponse.from_model(o) for o in rows]
    return ListResponse(data=items, total=len(items))


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    org = await OrganizationService(db).get(user, org_id)
    return OrganizationResponse.from_model(org)


@router.put("/{org_id}", response_model=ActionResponse[OrganizationResponse])
async def update_organization(
    org_id: UUID,
    body: OrganizationUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Owner edit; only allowed while the organization is pending."""
    org = await OrganizationService(db).update(user, org_id, body)
    message = "Services updated" if body.services_only else "Organization updated"
    return ActionResponse(message=message, data=OrganizationResponse.from_model(org))


@router.patch("/{org_id}/status", response_model=ActionResponse[OrganizationResponse])
async def update_organization_status(
    org_id: UUID,
    body: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    org = await OrganizationService(db).update_status(
        user, org_id, body.status, observed=body.observed_status
    )
    return ActionResponse(
        message=f"Organization status updated to {org.status}",
        data=OrganizationResponse.from_model(org),
    )


@router.delete("/{org_id}", response_model=ActionResponse[dict])
async def delete_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Admin delete; the organization's services go with it."""
    await OrganizationService(db).delete(user, org_id)
    return ActionResponse(message="Organization deleted", data={"id": str(org_id)})


@router.post("/{org_id}/documents", response_model=ActionResponse[OrganizationResponse])
async def regenerate_documents(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    documents: DocumentService | None = Depends(get_document_service),
):
    """Re-render the DOCX/PDF pair; storage failures surface as 503."""
    org = await OrganizationService(db).get_for_documents(user, org_id)
    if documents is None:
        raise StorageUnavailableError("Document generation is disabled", stage="config")
    await documents.attach_documents(db, org)
    return ActionResponse(message="Documents regenerated", data=OrganizationResponse.from_model(org))
