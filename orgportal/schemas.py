"""Pydantic v2 request/response schemas for all endpoints.

Request bodies accept the snake_case field names and, for compatibility with
the existing web client, the camelCase names it sends.
"""

import json
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class ActionResponse(BaseModel, Generic[T]):
    """Envelope for every mutating endpoint."""

    success: bool = True
    message: str
    data: T | None = None
    warnings: list[str] = Field(default_factory=list)


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    data: list[T] = Field(default_factory=list)
    total: int = 0


class CountResponse(BaseModel):
    status: str
    count: int


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ServiceDraft(BaseModel):
    """One service as submitted by a client, before it has an id."""

    model_config = ConfigDict(populate_by_name=True)

    service_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("service_name", "serviceName"),
    )
    category: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    requirements: str | None = Field(default=None, max_length=5000)

    @field_validator("service_name", "category")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


def _parse_services(value: Any) -> Any:
    """Accept a JSON-encoded services array as sent by multipart clients."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("services must be a JSON array") from exc
    if value is not None and not isinstance(value, list):
        raise ValueError("services must be an array")
    return value


class ContactDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    designation: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=200)
    contact_number: str = Field(
        ...,
        min_length=3,
        max_length=50,
        validation_alias=AliasChoices("contact_number", "contactNumber"),
    )

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("invalid email address")
        return v.strip()


_ORG_FIELD_ALIASES = {
    "institution_name": AliasChoices("institution_name", "institutionName"),
    "website_url": AliasChoices("website_url", "websiteUrl"),
    "contact": AliasChoices("contact", "personalDetails"),
    "organization_logo": AliasChoices(
        "organization_logo", "organizationLogo", "organizationLogoUrl"
    ),
    "profile_image": AliasChoices("profile_image", "profileImage", "profileImageUrl"),
}


class OrganizationCreate(BaseModel):
    """Body for creating a pending (or, on the deprecated path, live) organization."""

    model_config = ConfigDict(populate_by_name=True)

    province: str = Field(..., min_length=1, max_length=100)
    district: str = Field(..., min_length=1, max_length=100)
    institution_name: str = Field(
        ..., min_length=1, max_length=300, validation_alias=_ORG_FIELD_ALIASES["institution_name"]
    )
    website_url: str | None = Field(
        default=None, max_length=500, validation_alias=_ORG_FIELD_ALIASES["website_url"]
    )
    contact: ContactDetails = Field(..., validation_alias=_ORG_FIELD_ALIASES["contact"])
    organization_logo: str | None = Field(
        default=None, max_length=2000, validation_alias=_ORG_FIELD_ALIASES["organization_logo"]
    )
    profile_image: str | None = Field(
        default=None, max_length=2000, validation_alias=_ORG_FIELD_ALIASES["profile_image"]
    )
    services: list[ServiceDraft]

    _parse_services = field_validator("services", mode="before")(_parse_services)


class OrganizationUpdate(BaseModel):
    """Body for editing a pending-status organization.

    Either every organization field is supplied (full update, services
    optional) or only ``services`` is supplied (services-only update).
    """

    model_config = ConfigDict(populate_by_name=True)

    province: str | None = Field(default=None, min_length=1, max_length=100)
    district: str | None = Field(default=None, min_length=1, max_length=100)
    institution_name: str | None = Field(
        default=None, min_length=1, max_length=300, validation_alias=_ORG_FIELD_ALIASES["institution_name"]
    )
    website_url: str | None = Field(
        default=None, max_length=500, validation_alias=_ORG_FIELD_ALIASES["website_url"]
    )
    contact: ContactDetails | None = Field(
        default=None, validation_alias=_ORG_FIELD_ALIASES["contact"]
    )
    organization_logo: str | None = Field(
        default=None, max_length=2000, validation_alias=_ORG_FIELD_ALIASES["organization_logo"]
    )
    profile_image: str | None = Field(
        default=None, max_length=2000, validation_alias=_ORG_FIELD_ALIASES["profile_image"]
    )
    services: list[ServiceDraft] | None = None

    _parse_services = field_validator("services", mode="before")(_parse_services)

    @model_validator(mode="after")
    def _check_mode(self) -> "OrganizationUpdate":
        if self.services_only:
            return self
        missing = [
            name
            for name in ("province", "district", "institution_name", "contact")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self

    @property
    def services_only(self) -> bool:
        return self.model_fields_set == {"services"} and self.services is not None


class StatusUpdateRequest(BaseModel):
    """Body for PATCH .../status.

    ``status`` is validated by the status machine so that an unknown value is
    reported as ``invalid_status`` rather than a schema error.
    """

    status: str = Field(..., max_length=50)
    action: Literal["move"] | None = None
    observed_status: str | None = Field(
        default=None,
        validation_alias=AliasChoices("observed_status", "observedStatus"),
    )


class SubmissionReviewRequest(StatusUpdateRequest):
    reviewer_comments: str | None = Field(
        default=None,
        max_length=5000,
        validation_alias=AliasChoices("reviewer_comments", "reviewerComments"),
    )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    service_name: str
    category: str
    description: str | None
    requirements: str | None
    position: int = 0
    status: str | None = None
    created_at: datetime
    updated_at: datetime


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    owner_user_id: UUID
    service_name: str
    category: str
    description: str | None
    requirements: str | None
    status: str
    reviewer_id: UUID | None = None
    reviewer_comments: str | None = None
    created_at: datetime
    updated_at: datetime


class ContactResponse(BaseModel):
    name: str
    designation: str
    email: str
    contact_number: str


class PendingOrganizationResponse(BaseModel):
    id: UUID
    province: str
    district: str
    institution_name: str
    website_url: str | None
    contact: ContactResponse
    organization_logo: str | None
    profile_image: str | None
    status: str
    owner_user_id: UUID
    services: list[ServiceResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, org: Any, services: list[Any] | None = None, **extra: Any):
        return cls(
            id=org.id,
            province=org.province,
            district=org.district,
            institution_name=org.institution_name,
            website_url=org.website_url,
            contact=ContactResponse(
                name=org.contact_name,
                designation=org.contact_designation,
                email=org.contact_email,
                contact_number=org.contact_number,
            ),
            organization_logo=org.organization_logo,
            profile_image=org.profile_image,
            status=org.status,
            owner_user_id=org.owner_user_id,
            services=[
                ServiceResponse.model_validate(s)
                for s in (org.services if services is None else services)
            ],
            created_at=org.created_at,
            updated_at=org.updated_at,
            **extra,
        )


class OrganizationResponse(PendingOrganizationResponse):
    docx_url: str | None = None
    pdf_url: str | None = None

    @classmethod
    def from_model(cls, org: Any, services: list[Any] | None = None, **extra: Any):
        return super().from_model(
            org, services, docx_url=org.docx_url, pdf_url=org.pdf_url, **extra
        )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    notification_type: str
    title: str
    body: str
    link: str | None = None
    metadata: dict = Field(default_factory=dict)
    read_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, n: Any) -> "NotificationResponse":
        return cls(
            id=n.id,
            user_id=n.user_id,
            notification_type=n.notification_type,
            title=n.title,
            body=n.body,
            link=n.link,
            metadata=n.metadata_ or {},
            read_at=n.read_at,
            created_at=n.created_at,
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
    unread_count: int


class NotificationUnreadCountResponse(BaseModel):
    unread_count: int
