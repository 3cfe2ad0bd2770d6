from arealink.domain.identity.query.list_identities import (
    IdentitySummary,
    ListIdentities,
    ListIdentitiesHandler,
    ListIdentitiesResult,
)

__all__ = [
    "IdentitySummary",
    "ListIdentities",
    "ListIdentitiesHandler",
    "ListIdentitiesResult",
]
