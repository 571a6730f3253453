"""Initial schema for Forge projects, billing profiles and the Lab dashboard.

Revision ID: 20260101_000000
Revises:
Create Date: 2026-01-01 00:00:00.000000

Revision format: YYYYMMDD_HHMMSS_description
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260101_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # ============================================================================
    # Forge
    # ============================================================================
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="free"),
        sa.Column("ai_generations_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ai_generations_limit", sa.Integer(), nullable=False, server_default="25"),
        sa.Column("api_key_encrypted", sa.Text(), nullable=True),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("current_period_end", sa.DateTime(), nullable=True),
        sa.Column("is_student", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_profiles_email", "email"),
        sa.Index("ix_profiles_role", "role"),
        sa.Index("ix_profiles_stripe_customer_id", "stripe_customer_id"),
        sa.Index("ix_profiles_created_at", "created_at"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default="Untitled Project"),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("idea_input", sa.Text(), nullable=False, server_default=""),
        sa.Column("vision_statement", sa.Text(), nullable=False, server_default=""),
        sa.Column("research_data", sa.JSON(), nullable=False),
        sa.Column("prd_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("prd_history", sa.JSON(), nullable=False),
        sa.Column("realization_tasks", sa.JSON(), nullable=False),
        sa.Column("artifacts", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_projects_user_id", "user_id"),
        sa.Index("ix_projects_created_at", "created_at"),
        sa.Index("ix_projects_updated_at", "updated_at"),
    )

    op.create_table(
        "usage_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("action_type", sa.String(64), nullable=False),
        sa.Column("tokens_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_usage_logs_user_id", "user_id"),
        sa.Index("ix_usage_logs_action_type", "action_type"),
        sa.Index("ix_usage_logs_created_at", "created_at"),
    )

    # ============================================================================
    # Lab
    # ============================================================================
    op.create_table(
        "lab_projects",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False, server_default="idea"),
        sa.Column("category", sa.String(64), nullable=False, server_default="Design/AI"),
        sa.Column("url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("checklist", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lab_projects_status", "status"),
        sa.Index("ix_lab_projects_category", "category"),
        sa.Index("ix_lab_projects_created_at", "created_at"),
    )

    op.create_table(
        "lab_client_previews",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(320), nullable=False),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("project_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("subdomain", sa.String(63), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("password", sa.String(255), nullable=False, server_default=""),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("last_sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lab_client_previews_subdomain", "subdomain"),
        sa.Index("ix_lab_client_previews_status", "status"),
        sa.Index("ix_lab_client_previews_created_at", "created_at"),
    )

    op.create_table(
        "lab_dev_deployments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("branch", sa.String(255), nullable=False, server_default="main"),
        sa.Column("preview_url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False, server_default="development"),
        sa.Column("repo_url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("last_deployed_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lab_dev_deployments_status", "status"),
    )

    op.create_table(
        "lab_notes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lab_notes_created_at", "created_at"),
    )

    op.create_table(
        "lab_activity",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("action", sa.String(255), nullable=False),
        sa.Column("target", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lab_activity_type", "type"),
        sa.Index("ix_lab_activity_created_at", "created_at"),
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("lab_activity")
    op.drop_table("lab_notes")
    op.drop_table("lab_dev_deployments")
    op.drop_table("lab_client_previews")
    op.drop_table("lab_projects")
    op.drop_table("usage_logs")
    op.drop_table("projects")
    op.drop_table("profiles")
