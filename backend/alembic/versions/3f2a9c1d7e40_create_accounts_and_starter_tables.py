"""create accounts and starter tables

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f2a9c1d7e40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("terms_accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bcc_terms_accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_time", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organization_accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("vat", sa.String(length=64), nullable=True),
        sa.Column("account_type", sa.String(length=30), nullable=False),
        sa.Column("nace", sa.String(length=32), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("country", sa.String(length=2), nullable=True),
        sa.Column("modules", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "organization_account_children",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "parent_id",
            sa.Uuid(),
            sa.ForeignKey("organization_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "child_id",
            sa.Uuid(),
            sa.ForeignKey("organization_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.UniqueConstraint("parent_id", "child_id", name="uq_organization_account_children_parent_child"),
    )
    op.create_index("ix_organization_account_children_parent_id", "organization_account_children", ["parent_id"])
    op.create_index("ix_organization_account_children_child_id", "organization_account_children", ["child_id"])

    op.create_table(
        "organization_memberships",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "organization_id",
            sa.Uuid(),
            sa.ForeignKey("organization_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_memberships_org_user"),
    )
    op.create_index("ix_organization_memberships_organization_id", "organization_memberships", ["organization_id"])
    op.create_index("ix_organization_memberships_user_id", "organization_memberships", ["user_id"])

    op.create_table(
        "starter_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "organization_id",
            sa.Uuid(),
            sa.ForeignKey("organization_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated_by", sa.Uuid(), nullable=False),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("covered_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("covered_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("report_id", sa.String(length=64), nullable=True),
        sa.Column("data_sources", sa.JSON(), nullable=False),
        sa.Column("raw_client_state", sa.JSON(), nullable=False),
    )
    op.create_index("ix_starter_entries_organization_id", "starter_entries", ["organization_id"])

    op.create_table(
        "calculated_impacts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("data_source_id", sa.String(length=64), nullable=False),
        sa.Column("transaction_id", sa.String(length=64), nullable=True),
        sa.Column("ghg_scope", sa.String(length=64), nullable=True),
        sa.Column("category", sa.String(length=200), nullable=True),
        sa.Column("impact_value", sa.Float(), nullable=True),
        sa.Column("indicator", sa.String(length=64), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_calculated_impacts_organization_id", "calculated_impacts", ["organization_id"])
    op.create_index("ix_calculated_impacts_data_source_id", "calculated_impacts", ["data_source_id"])


def downgrade() -> None:
    op.drop_index("ix_calculated_impacts_data_source_id", table_name="calculated_impacts")
    op.drop_index("ix_calculated_impacts_organization_id", table_name="calculated_impacts")
    op.drop_table("calculated_impacts")
    op.drop_index("ix_starter_entries_organization_id", table_name="starter_entries")
    op.drop_table("starter_entries")
    op.drop_index("ix_organization_memberships_user_id", table_name="organization_memberships")
    op.drop_index("ix_organization_memberships_organization_id", table_name="organization_memberships")
    op.drop_table("organization_memberships")
    op.drop_index("ix_organization_account_children_child_id", table_name="organization_account_children")
    op.drop_index("ix_organization_account_children_parent_id", table_name="organization_account_children")
    op.drop_table("organization_account_children")
    op.drop_table("organization_accounts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
