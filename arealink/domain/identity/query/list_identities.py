"""Query for the identities linked to the signed-in user."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.principal import Principal
from arealink.domain.identity.service.oauth import OAuthService
from arealink.domain.shared.query import Query, QueryHandler, Result


class ListIdentities(Query):
    pass


class IdentitySummary(BaseModel):
    """An identity without its tokens."""

    id: str
    provider: str
    subject: str
    scopes: list[str]
    expires_at: datetime | None
    has_refresh_token: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentitySummary":
        return cls(
            id=str(identity.id),
            provider=identity.provider,
            subject=identity.subject,
            scopes=list(identity.scopes),
            expires_at=identity.expires_at,
            has_refresh_token=bool(identity.refresh_token),
            created_at=identity.created_at,
            updated_at=identity.updated_at,
        )


class ListIdentitiesResult(Result):
    identities: list[IdentitySummary]


@dataclass
class ListIdentitiesHandler(QueryHandler[ListIdentities, ListIdentitiesResult]):
    oauth_service: OAuthService
    principal: Principal | None

    async def run(self, query: ListIdentities) -> ListIdentitiesResult:
        user_id = self.principal.user_id if self.principal else None
        identities = await self.oauth_service.list_identities(user_id)
        return ListIdentitiesResult(
            identities=[IdentitySummary.from_identity(i) for i in identities]
        )
