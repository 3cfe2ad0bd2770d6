"""Integration tests for the SQL repositories on in-memory SQLite."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from arealink.config import DatabaseConfig
from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.session import RequestMetadata, Session
from arealink.domain.identity.model.token import OAuthToken
from arealink.domain.identity.model.user import User, UserStatus
from arealink.domain.identity.model.value import IdentityId, SessionId, UserId
from arealink.domain.shared.error import ConflictError, NotFoundError
from arealink.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
    create_tables,
)
from arealink.infrastructure.persistence.repository import (
    SqlIdentityRepository,
    SqlSessionRepository,
    SqlUserRepository,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def engine():
    """Per-test in-memory SQLite engine with the schema created."""
    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user(db_session) -> User:
    return await SqlUserRepository(db_session).create(User.create(email="jane@example.com", now=NOW))


def make_identity(user_id: UserId, subject: str = "zoom-user-1") -> Identity:
    return Identity.create(
        user_id=user_id,
        provider="zoom",
        subject=subject,
        token=OAuthToken(
            access_token="access-1",
            refresh_token="refresh-123",
            scopes=("email", "profile"),
            expires_at=NOW + timedelta(hours=1),
        ),
        now=NOW,
    )


class TestSqlUserRepository:
    @pytest.mark.asyncio
    async def test_get_by_email_is_case_insensitive(self, db_session, user):
        repo = SqlUserRepository(db_session)

        found = await repo.get_by_email("  JANE@example.com ")

        assert found is not None
        assert found.id == user.id
        assert found.created_at == NOW

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, db_session, user):
        repo = SqlUserRepository(db_session)

        with pytest.raises(ConflictError):
            await repo.create(User.create(email="jane@example.com", now=NOW))

    @pytest.mark.asyncio
    async def test_update(self, db_session, user):
        repo = SqlUserRepository(db_session)
        user.status = UserStatus.SUSPENDED
        user.record_login(NOW + timedelta(minutes=1))

        await repo.update(user)
        found = await repo.get(user.id)

        assert found.status == UserStatus.SUSPENDED
        assert found.last_login_at == NOW + timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            await SqlUserRepository(db_session).update(User.create(email="ghost@example.com", now=NOW))


class TestSqlIdentityRepository:
    """Tests for SqlIdentityRepository."""

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, db_session, user):
        repo = SqlIdentityRepository(db_session)
        identity = await repo.create(make_identity(user.id))

        by_id = await repo.get(identity.id)
        by_subject = await repo.get_by_provider_and_subject("zoom", "zoom-user-1")

        assert by_id == identity
        assert by_subject == identity
        assert by_id.scopes == ["email", "profile"]
        assert by_id.expires_at == NOW + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_same_provider_subject_conflicts(self, db_session, user):
        repo = SqlIdentityRepository(db_session)
        await repo.create(make_identity(user.id))

        with pytest.raises(ConflictError) as exc_info:
            await repo.create(make_identity(user.id))

        assert exc_info.value.code == "identity_conflict"

    @pytest.mark.asyncio
    async def test_update_replaces_record(self, db_session, user):
        repo = SqlIdentityRepository(db_session)
        identity = await repo.create(make_identity(user.id))
        later = NOW + timedelta(hours=2)

        updated = identity.with_tokens(
            OAuthToken(access_token="access-2", expires_at=later + timedelta(hours=1)), later
        )
        await repo.update(updated)
        found = await repo.get(identity.id)

        assert found.access_token == "access-2"
        assert found.refresh_token == "refresh-123"
        assert found.expires_at == later + timedelta(hours=1)
        assert found.updated_at == later

    @pytest.mark.asyncio
    async def test_update_missing_identity(self, db_session, user):
        with pytest.raises(NotFoundError):
            await SqlIdentityRepository(db_session).update(make_identity(user.id))

    @pytest.mark.asyncio
    async def test_list_by_user(self, db_session, user):
        repo = SqlIdentityRepository(db_session)
        await repo.create(make_identity(user.id, "zoom-user-1"))
        await repo.create(make_identity(user.id, "zoom-user-2"))

        identities = await repo.list_by_user(user.id)

        assert {i.subject for i in identities} == {"zoom-user-1", "zoom-user-2"}
        assert await repo.list_by_user(UserId.generate()) == []

    @pytest.mark.asyncio
    async def test_unknown_identity(self, db_session):
        assert await SqlIdentityRepository(db_session).get(IdentityId.generate()) is None


class TestSqlSessionRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session, user):
        repo = SqlSessionRepository(db_session)
        session = Session.create(
            user_id=user.id,
            ttl=timedelta(hours=168),
            now=NOW,
            metadata=RequestMetadata(client_ip="10.0.0.1", user_agent="pytest"),
            auth_provider="zoom",
        )

        await repo.create(session)
        found = await repo.get(session.id)

        assert found == session
        assert found.active(NOW + timedelta(hours=1))
        assert not found.active(NOW + timedelta(hours=169))

    @pytest.mark.asyncio
    async def test_unknown_session(self, db_session):
        assert await SqlSessionRepository(db_session).get(SessionId.generate()) is None
