"""SQLAlchemy ORM models for the live and staging tables."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


STATUS_CHECK = "status IN ('pending','approved','rejected')"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_email", "email"),
        CheckConstraint("role IN ('user','admin')", name="ck_user_role"),
        CheckConstraint("status IN ('active','suspended')", name="ck_user_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    role: Mapped[str] = mapped_column(
        Text, nullable=False, default="user", server_default=text("'user'")
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="active", server_default=text("'active'")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ---------------------------------------------------------------------------
# Shared column sets
# ---------------------------------------------------------------------------


class OrganizationFieldsMixin:
    """Business fields shared by live and pending organizations."""

    province: Mapped[str] = mapped_column(Text, nullable=False)
    district: Mapped[str] = mapped_column(Text, nullable=False)
    institution_name: Mapped[str] = mapped_column(Text, nullable=False)
    website_url: Mapped[str | None] = mapped_column(Text)
    contact_name: Mapped[str] = mapped_column(Text, nullable=False)
    contact_designation: Mapped[str] = mapped_column(Text, nullable=False)
    contact_email: Mapped[str] = mapped_column(Text, nullable=False)
    contact_number: Mapped[str] = mapped_column(Text, nullable=False)
    organization_logo: Mapped[str | None] = mapped_column(Text)
    profile_image: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="pending", server_default=text("'pending'")
    )
    owner_user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class ServiceFieldsMixin:
    """Business fields shared by every service-shaped table."""

    service_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    requirements: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


# Columns copied verbatim when a staged row is promoted.
ORGANIZATION_BUSINESS_FIELDS: tuple[str, ...] = (
    "province",
    "district",
    "institution_name",
    "website_url",
    "contact_name",
    "contact_designation",
    "contact_email",
    "contact_number",
    "organization_logo",
    "profile_image",
)
SERVICE_BUSINESS_FIELDS: tuple[str, ...] = (
    "service_name",
    "category",
    "description",
    "requirements",
)


# ---------------------------------------------------------------------------
# Live tables
# ---------------------------------------------------------------------------


class Organization(OrganizationFieldsMixin, Base):
    __tablename__ = "organizations"
    __table_args__ = (
        Index("idx_organizations_status", "status"),
        Index("idx_organizations_owner", "owner_user_id"),
        CheckConstraint(STATUS_CHECK, name="ck_organization_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    docx_url: Mapped[str | None] = mapped_column(Text)
    pdf_url: Mapped[str | None] = mapped_column(Text)

    services: Mapped[list["Service"]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Service.position",
    )


class Service(ServiceFieldsMixin, Base):
    __tablename__ = "services"
    __table_args__ = (
        Index("idx_services_organization", "organization_id"),
        Index("idx_services_status", "status"),
        CheckConstraint(STATUS_CHECK, name="ck_service_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="pending", server_default=text("'pending'")
    )

    organization: Mapped["Organization"] = relationship(back_populates="services")


# ---------------------------------------------------------------------------
# Staging tables
# ---------------------------------------------------------------------------


class PendingOrganization(OrganizationFieldsMixin, Base):
    __tablename__ = "pending_organizations"
    __table_args__ = (
        Index("idx_pending_organizations_status", "status"),
        Index("idx_pending_organizations_owner", "owner_user_id"),
        CheckConstraint(STATUS_CHECK, name="ck_pending_organization_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    services: Mapped[list["PendingService"]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PendingService.position",
    )


class PendingService(ServiceFieldsMixin, Base):
    __tablename__ = "pending_services"
    __table_args__ = (
        Index("idx_pending_services_organization", "organization_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("pending_organizations.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    organization: Mapped["PendingOrganization"] = relationship(back_populates="services")


class ServiceSubmission(ServiceFieldsMixin, Base):
    """A new service for an approved organization, waiting in the review queue."""

    __tablename__ = "service_submissions"
    __table_args__ = (
        Index("idx_service_submissions_status", "status"),
        Index("idx_service_submissions_owner", "owner_user_id"),
        Index("idx_service_submissions_organization", "organization_id"),
        CheckConstraint(STATUS_CHECK, name="ck_service_submission_status"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    owner_user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="pending", server_default=text("'pending'")
    )
    reviewer_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    reviewer_comments: Mapped[str | None] = mapped_column(Text)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_user_read", "user_id", "read_at"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    notification_type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str | None] = mapped_column(Text)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
