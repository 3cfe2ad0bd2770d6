"""SQL repository for login sessions."""

from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from arealink.domain.identity.model.session import Session
from arealink.domain.identity.model.value import SessionId, UserId
from arealink.domain.identity.port.repository import SessionRepository
from arealink.infrastructure.persistence.repository.base import as_utc
from arealink.infrastructure.persistence.tables import sessions_table


def _row_to_session(row: dict) -> Session:
    return Session(
        id=SessionId(UUID(row["id"])),
        user_id=UserId(UUID(row["user_id"])),
        issued_at=as_utc(row["issued_at"]),
        expires_at=as_utc(row["expires_at"]),
        revoked_at=as_utc(row["revoked_at"]),
        ip=row["ip"],
        user_agent=row["user_agent"],
        auth_provider=row["auth_provider"],
    )


def _session_to_dict(session: Session) -> dict:
    return {
        "id": str(session.id),
        "user_id": str(session.user_id),
        "issued_at": session.issued_at,
        "expires_at": session.expires_at,
        "revoked_at": session.revoked_at,
        "ip": session.ip,
        "user_agent": session.user_agent,
        "auth_provider": session.auth_provider,
    }


class SqlSessionRepository(SessionRepository):
    """SQLAlchemy implementation of SessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, login_session: Session) -> Session:
        await self.session.execute(insert(sessions_table).values(**_session_to_dict(login_session)))
        await self.session.flush()
        return login_session

    async def get(self, session_id: SessionId) -> Session | None:
        stmt = select(sessions_table).where(sessions_table.c.id == str(session_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_session(dict(row)) if row else None
