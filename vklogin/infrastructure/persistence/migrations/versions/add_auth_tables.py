"""add_auth_tables

Add auth_requests, accounts, and identity_links tables.

Revision ID: add_auth_tables
Revises:
Create Date: 2026-10-15

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_auth_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add authentication tables."""
    # AUTH REQUESTS TABLE
    op.create_table(
        "auth_requests",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_auth_requests_created_at", "auth_requests", ["created_at"])

    # ACCOUNTS TABLE
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password_hash", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    # IDENTITY LINKS TABLE (external_id intentionally not unique)
    op.create_table(
        "identity_links",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("profile", sa.JSON(), nullable=False),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["account_id"],
            ["accounts.id"],
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_identity_links_external_id_created_at",
        "identity_links",
        ["external_id", "created_at"],
    )
    op.create_index("ix_identity_links_account_id", "identity_links", ["account_id"])


def downgrade() -> None:
    """Remove authentication tables."""
    op.drop_index("ix_identity_links_account_id", table_name="identity_links")
    op.drop_index("ix_identity_links_external_id_created_at", table_name="identity_links")
    op.drop_table("identity_links")

    op.drop_table("accounts")

    op.drop_index("ix_auth_requests_created_at", table_name="auth_requests")
    op.drop_table("auth_requests")
