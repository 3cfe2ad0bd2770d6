from arealink.infrastructure.persistence.repository.identity import SqlIdentityRepository
from arealink.infrastructure.persistence.repository.session import SqlSessionRepository
from arealink.infrastructure.persistence.repository.user import SqlUserRepository

__all__ = ["SqlIdentityRepository", "SqlSessionRepository", "SqlUserRepository"]
