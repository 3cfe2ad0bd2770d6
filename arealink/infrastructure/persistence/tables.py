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
    UniqueConstraint,
)
from sqlalchemy.types import JSON

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("email", String(320), nullable=False),  # Lower-cased
    Column("status", String(16), nullable=False),  # UserStatus as string
    Column("role", String(16), nullable=False),  # UserRole as string
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("last_login_at", DateTime(timezone=True), nullable=True),
    UniqueConstraint("email", name="uq_users_email"),
)


# ============================================================================
# IDENTITIES TABLE (linked OAuth accounts)
# ============================================================================
identities_table = Table(
    "identities",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),  # "zoom", "google", etc.
    Column("subject", String(255), nullable=False),  # Provider account id
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text, nullable=True),
    Column("scopes", JSON, nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("provider", "subject", name="uq_identity_provider_subject"),
)

Index("ix_identities_user_id", identities_table.c.user_id)


# ============================================================================
# SESSIONS TABLE
# ============================================================================
sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("issued_at", DateTime(timezone=True), nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=False),
    Column("revoked_at", DateTime(timezone=True), nullable=True),
    Column("ip", String(64), nullable=True),
    Column("user_agent", String(512), nullable=True),
    Column("auth_provider", String(50), nullable=True),
)

Index("ix_sessions_user_id", sessions_table.c.user_id)
