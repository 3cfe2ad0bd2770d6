"""SQL repository for linked identities."""

import logging
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.value import IdentityId, UserId
from arealink.domain.identity.port.repository import IdentityRepository
from arealink.domain.shared.error import ConflictError, NotFoundError
from arealink.infrastructure.persistence.repository.base import as_utc
from arealink.infrastructure.persistence.tables import identities_table

logger = logging.getLogger(__name__)


def _row_to_identity(row: dict) -> Identity:
    """Convert a database row to an Identity model."""
    return Identity(
        id=IdentityId(UUID(row["id"])),
        user_id=UserId(UUID(row["user_id"])),
        provider=row["provider"],
        subject=row["subject"],
        access_token=row["access_token"],
        refresh_token=row["refresh_token"],
        scopes=list(row["scopes"] or []),
        expires_at=as_utc(row["expires_at"]),
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


def _identity_to_dict(identity: Identity) -> dict:
    """Convert an Identity model to a database row dict."""
    return {
        "id": str(identity.id),
        "user_id": str(identity.user_id),
        "provider": identity.provider,
        "subject": identity.subject,
        "access_token": identity.access_token,
        "refresh_token": identity.refresh_token,
        "scopes": list(identity.scopes),
        "expires_at": identity.expires_at,
        "created_at": identity.created_at,
        "updated_at": identity.updated_at,
    }


class SqlIdentityRepository(IdentityRepository):
    """SQLAlchemy implementation of IdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, identity: Identity) -> Identity:
        existing = await self.get_by_provider_and_subject(identity.provider, identity.subject)
        if existing is not None:
            raise ConflictError(
                f"Identity already linked: provider={identity.provider}, subject={identity.subject}",
                code="identity_conflict",
            )
        try:
            await self.session.execute(insert(identities_table).values(**_identity_to_dict(identity)))
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Identity already linked: provider={identity.provider}, subject={identity.subject}",
                code="identity_conflict",
            ) from e
        return identity

    async def update(self, identity: Identity) -> Identity:
        stmt = (
            update(identities_table)
            .where(identities_table.c.id == str(identity.id))
            .values(
                access_token=identity.access_token,
                refresh_token=identity.refresh_token,
                scopes=list(identity.scopes),
                expires_at=identity.expires_at,
                updated_at=identity.updated_at,
            )
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError(f"Identity not found: {identity.id}", code="identity_not_found")
        await self.session.flush()
        return identity

    async def get(self, identity_id: IdentityId) -> Identity | None:
        stmt = select(identities_table).where(identities_table.c.id == str(identity_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_identity(dict(row)) if row else None

    async def get_by_provider_and_subject(self, provider: str, subject: str) -> Identity | None:
        stmt = select(identities_table).where(
            identities_table.c.provider == provider,
            identities_table.c.subject == subject,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_identity(dict(row)) if row else None

    async def list_by_user(self, user_id: UserId) -> list[Identity]:
        stmt = (
            select(identities_table)
            .where(identities_table.c.user_id == str(user_id))
            .order_by(identities_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [_row_to_identity(dict(row)) for row in result.mappings().all()]
