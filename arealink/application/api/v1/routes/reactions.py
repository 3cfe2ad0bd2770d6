"""Routes for running reactions on the caller's behalf."""

from typing import Any

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from pydantic import BaseModel

from arealink.domain.reaction.command.run_reaction import (
    RunReaction,
    RunReactionHandler,
    RunReactionResult,
)

router = APIRouter(prefix="/reactions", tags=["Reactions"], route_class=DishkaRoute)


class RunReactionBody(BaseModel):
    identity_id: str
    params: dict[str, Any] = {}


@router.post("/{component}/run")
async def run_reaction(
    component: str,
    body: RunReactionBody,
    handler: FromDishka[RunReactionHandler],
) -> RunReactionResult:
    return await handler.run(
        RunReaction(component=component, identity_id=body.identity_id, params=body.params)
    )
