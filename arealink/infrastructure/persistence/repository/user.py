"""SQL repository for users."""

from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arealink.domain.identity.model.user import User, UserRole, UserStatus
from arealink.domain.identity.model.value import UserId
from arealink.domain.identity.port.repository import UserRepository
from arealink.domain.shared.error import ConflictError, NotFoundError
from arealink.infrastructure.persistence.repository.base import as_utc
from arealink.infrastructure.persistence.tables import users_table


def _row_to_user(row: dict) -> User:
    """Convert a database row to a User model."""
    return User(
        id=UserId(UUID(row["id"])),
        email=row["email"],
        status=UserStatus(row["status"]),
        role=UserRole(row["role"]),
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        last_login_at=as_utc(row["last_login_at"]),
    )


def _user_to_dict(user: User) -> dict:
    """Convert a User model to a database row dict."""
    return {
        "id": str(user.id),
        "email": user.email,
        "status": user.status.value,
        "role": user.role.value,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "last_login_at": user.last_login_at,
    }


class SqlUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: UserId) -> User | None:
        stmt = select(users_table).where(users_table.c.id == str(user_id))
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(users_table).where(users_table.c.email == email.strip().lower())
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def create(self, user: User) -> User:
        if await self.get_by_email(user.email) is not None:
            raise ConflictError(f"User already exists: {user.email}", code="user_conflict")
        try:
            await self.session.execute(insert(users_table).values(**_user_to_dict(user)))
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(f"User already exists: {user.email}", code="user_conflict") from e
        return user

    async def update(self, user: User) -> User:
        values = _user_to_dict(user)
        del values["id"]
        stmt = update(users_table).where(users_table.c.id == str(user.id)).values(**values)
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError(f"User not found: {user.id}", code="user_not_found")
        await self.session.flush()
        return user
