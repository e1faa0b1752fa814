"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import JSON

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# AUTH REQUESTS TABLE (pending logins; row id is the OAuth state)
# ============================================================================
auth_requests_table = Table(
    "auth_requests",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index("ix_auth_requests_created_at", auth_requests_table.c.created_at)


# ============================================================================
# ACCOUNTS TABLE
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("username", String(64), nullable=False, unique=True),  # Random, base64
    Column("password_hash", String(64), nullable=False),  # SHA256 of random password
    Column("created_at", DateTime(timezone=True), nullable=False),
)


# ============================================================================
# IDENTITY LINKS TABLE
# ============================================================================
# external_id is deliberately NOT unique: concurrent first logins may insert
# duplicates, and readers pick the oldest.
identity_links_table = Table(
    "identity_links",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("external_id", String(64), nullable=False),  # VK user id
    Column("access_token", Text, nullable=False),
    Column("profile", JSON, nullable=False),  # first_name, last_name, extra
    Column(
        "account_id", String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    ),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index(
    "ix_identity_links_external_id_created_at",
    identity_links_table.c.external_id,
    identity_links_table.c.created_at,
)
Index("ix_identity_links_account_id", identity_links_table.c.account_id)
