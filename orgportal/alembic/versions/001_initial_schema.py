"""Initial schema: users, live and staging tables, notifications.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_CHECK = "status IN ('pending','approved','rejected')"


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _organization_columns() -> list[sa.Column]:
    return [
        sa.Column("province", sa.Text(), nullable=False),
        sa.Column("district", sa.Text(), nullable=False),
        sa.Column("institution_name", sa.Text(), nullable=False),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("contact_name", sa.Text(), nullable=False),
        sa.Column("contact_designation", sa.Text(), nullable=False),
        sa.Column("contact_email", sa.Text(), nullable=False),
        sa.Column("contact_number", sa.Text(), nullable=False),
        sa.Column("organization_logo", sa.Text(), nullable=True),
        sa.Column("profile_image", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("owner_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
    ]


def _service_columns() -> list[sa.Column]:
    return [
        sa.Column("service_name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # --- users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'user'")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'active'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('user','admin')", name="ck_user_role"),
        sa.CheckConstraint("status IN ('active','suspended')", name="ck_user_status"),
    )
    op.create_index("idx_users_email", "users", ["email"])

    # --- live tables ---
    op.create_table(
        "organizations",
        _id(),
        *_organization_columns(),
        sa.Column("docx_url", sa.Text(), nullable=True),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(STATUS_CHECK, name="ck_organization_status"),
    )
    op.create_index("idx_organizations_status", "organizations", ["status"])
    op.create_index("idx_organizations_owner", "organizations", ["owner_user_id"])

    op.create_table(
        "services",
        _id(),
        sa.Column(
            "organization_id",
            UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_service_columns(),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        sa.CheckConstraint(STATUS_CHECK, name="ck_service_status"),
    )
    op.create_index("idx_services_organization", "services", ["organization_id"])
    op.create_index("idx_services_status", "services", ["status"])

    # --- staging tables ---
    op.create_table(
        "pending_organizations",
        _id(),
        *_organization_columns(),
        *_timestamps(),
        sa.CheckConstraint(STATUS_CHECK, name="ck_pending_organization_status"),
    )
    op.create_index("idx_pending_organizations_status", "pending_organizations", ["status"])
    op.create_index("idx_pending_organizations_owner", "pending_organizations", ["owner_user_id"])

    op.create_table(
        "pending_services",
        _id(),
        sa.Column(
            "organization_id",
            UUID(as_uuid=True),
            sa.ForeignKey("pending_organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_service_columns(),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )
    op.create_index("idx_pending_services_organization", "pending_services", ["organization_id"])

    op.create_table(
        "service_submissions",
        _id(),
        sa.Column(
            "organization_id",
            UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("owner_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        *_service_columns(),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("reviewer_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewer_comments", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(STATUS_CHECK, name="ck_service_submission_status"),
    )
    op.create_index("idx_service_submissions_status", "service_submissions", ["status"])
    op.create_index("idx_service_submissions_owner", "service_submissions", ["owner_user_id"])
    op.create_index("idx_service_submissions_organization", "service_submissions", ["organization_id"])

    # --- notifications ---
    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("notification_type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("metadata", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_notifications_user_read", "notifications", ["user_id", "read_at"])
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("service_submissions")
    op.drop_table("pending_services")
    op.drop_table("pending_organizations")
    op.drop_table("services")
    op.drop_table("organizations")
    op.drop_table("users")
