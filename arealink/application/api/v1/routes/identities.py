"""Routes for the signed-in user's linked identities."""

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter

from arealink.domain.identity.query.list_identities import (
    ListIdentities,
    ListIdentitiesHandler,
    ListIdentitiesResult,
)

router = APIRouter(prefix="/identities", tags=["Identities"], route_class=DishkaRoute)


@router.get("")
async def list_identities(handler: FromDishka[ListIdentitiesHandler]) -> ListIdentitiesResult:
    """Identities linked to the caller. Tokens are never returned."""
    return await handler.run(ListIdentities())
