"""Service endpoints — live services and the submission review queue."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgportal.auth import get_current_user
from orgportal.database import get_db
from orgportal.models import Service, User
from orgportal.schemas import (
    ActionResponse,
    ListResponse,
    ServiceDraft,
    ServiceResponse,
    StatusUpdateRequest,
    SubmissionResponse,
    SubmissionReviewRequest,
)
from orgportal.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/services", tags=["services"])


# ===========================================
# LISTINGS
# ===========================================


@router.get("/user", response_model=ListResponse[ServiceResponse])
async def list_my_services(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Live services of every organization the caller owns."""
    rows = await CatalogService(db).list_for_user(user)
    return ListResponse(data=[ServiceResponse.model_validate(s) for s in rows], total=len(rows))


@router.get("", response_model=ListResponse[ServiceResponse])
async def list_services(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await CatalogService(db).list_all(user, status)
    return ListResponse(data=[ServiceResponse.model_validate(s) for s in rows], total=len(rows))


@router.get("/organizations/{org_id}", response_model=ListResponse[ServiceResponse])
async def list_organization_services(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await CatalogService(db).list_for_organization(user, org_id)
    return ListResponse(data=[ServiceResponse.model_validate(s) for s in rows], total=len(rows))


# ===========================================
# SUBMISSIONS
# ===========================================


@router.post(
    "/organizations/{org_id}/submissions",
    status_code=201,
    response_model=ActionResponse[SubmissionResponse],
)
async def create_service_submission(
    org_id: UUID,
    body: ServiceDraft,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Queue a new service for an approved organization."""
    submission = await CatalogService(db).create_submission(user, org_id, body)
    return ActionResponse(
        message="Service submitted for review",
        data=SubmissionResponse.model_validate(submission),
    )


@router.get("/submissions", response_model=ListResponse[SubmissionResponse])
async def list_service_submissions(
    status: str | None = Query(None, description="Defaults to pending"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await CatalogService(db).list_submissions(user, status)
    return ListResponse(data=[SubmissionResponse.model_validate(s) for s in rows], total=len(rows))


@router.get("/submissions/user", response_model=ListResponse[SubmissionResponse])
async def list_my_service_submissions(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await CatalogService(db).list_submissions_for_user(user)
    return ListResponse(data=[SubmissionResponse.model_validate(s) for s in rows], total=len(rows))


@router.patch("/submissions/{submission_id}/status")
async def review_service_submission(
    submission_id: UUID,
    body: SubmissionReviewRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Admin review; ``approved`` with ``action: move`` publishes the service."""
    result = await CatalogService(db).review_submission(
        user,
        submission_id,
        body.status,
        comments=body.reviewer_comments,
        action=body.action,
        observed=body.observed_status,
    )
    if isinstance(result, Service):
        return ActionResponse[ServiceResponse](
            message="Service approved and published",
            data=ServiceResponse.model_validate(result),
        )
    return ActionResponse[SubmissionResponse](
        message=f"Service {result.status}",
        data=SubmissionResponse.model_validate(result),
    )


@router.post("/submissions/{submission_id}/submit", response_model=ActionResponse[ServiceResponse])
async def submit_service_for_approval(
    submission_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = await CatalogService(db).submit_submission(user, submission_id)
    return ActionResponse(
        message="Service published",
        data=ServiceResponse.model_validate(service),
    )


@router.delete("/submissions/{submission_id}", response_model=ActionResponse[dict])
async def delete_service_submission(
    submission_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await CatalogService(db).delete_submission(user, submission_id)
    return ActionResponse(message="Service submission deleted", data={"id": str(submission_id)})


# ===========================================
# LIVE SERVICE BY ID
# ===========================================


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = await CatalogService(db).get(user, service_id)
    return ServiceResponse.model_validate(service)


@router.put("/{service_id}", response_model=ActionResponse[ServiceResponse])
async def update_service(
    service_id: UUID,
    body: ServiceDraft,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = await CatalogService(db).update(user, service_id, body)
    return ActionResponse(message="Service updated", data=ServiceResponse.model_validate(service))


@router.patch("/{service_id}/status", response_model=ActionResponse[ServiceResponse])
async def update_service_status(
    service_id: UUID,
    body: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = await CatalogService(db).update_status(
        user, service_id, body.status, observed=body.observed_status
    )
    return ActionResponse(
        message=f"Service status updated to {service.status}",
        data=ServiceResponse.model_validate(service),
    )


@router.delete("/{service_id}", response_model=ActionResponse[dict])
async def delete_service(
    service_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await CatalogService(db).delete(user, service_id)
    return ActionResponse(message="Service deleted", data={"id": str(service_id)})
