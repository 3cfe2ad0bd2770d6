"""Unit tests for ReactionDispatcher and RunReactionHandler."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from arealink.domain.identity.model.principal import Principal
from arealink.domain.identity.model.value import SessionId, UserId
from arealink.domain.reaction.command.run_reaction import RunReaction, RunReactionHandler
from arealink.domain.reaction.model.result import ReactionResult, RecordedRequest, RecordedResponse
from arealink.domain.reaction.service.dispatcher import ReactionDispatcher
from arealink.domain.shared.error import AuthorizationError, NotFoundError


def make_result() -> ReactionResult:
    return ReactionResult(
        component="zoom_create_meeting",
        provider="zoom",
        identity_id="id-1",
        endpoint="https://api.zoom.us/v2/users/me/meetings",
        request=RecordedRequest(method="POST", url="https://api.zoom.us/v2/users/me/meetings"),
        response=RecordedResponse(status=201),
        duration_ms=12.0,
    )


def make_executor(component: str = "zoom_create_meeting") -> MagicMock:
    executor = MagicMock()
    executor.component = component
    executor.supports.side_effect = lambda name: name.strip().lower() == component
    executor.execute = AsyncMock(return_value=make_result())
    return executor


class TestReactionDispatcher:
    def test_unknown_component(self):
        dispatcher = ReactionDispatcher([make_executor()])

        with pytest.raises(NotFoundError) as exc_info:
            dispatcher.executor_for("slack_message")

        assert exc_info.value.code == "unknown_component"

    @pytest.mark.asyncio
    async def test_execute_routes_to_supporting_executor(self):
        other = make_executor("github_issue")
        zoom = make_executor()
        dispatcher = ReactionDispatcher([other, zoom])
        user_id = UserId.generate()

        result = await dispatcher.execute("Zoom_Create_Meeting", "id-1", user_id, {"topic": "x"})

        assert result.response.status == 201
        zoom.execute.assert_awaited_once_with("id-1", user_id, {"topic": "x"})
        other.execute.assert_not_called()


class TestRunReactionHandler:
    """Tests for RunReactionHandler."""

    @pytest.mark.asyncio
    async def test_requires_session(self):
        executor = make_executor()
        handler = RunReactionHandler(dispatcher=ReactionDispatcher([executor]), principal=None)

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(RunReaction(component="zoom_create_meeting", identity_id="id-1"))

        assert exc_info.value.code == "missing_session"
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_runs_as_session_user(self):
        executor = make_executor()
        principal = Principal(user_id=UserId.generate(), session_id=SessionId.generate())
        handler = RunReactionHandler(dispatcher=ReactionDispatcher([executor]), principal=principal)

        result = await handler.run(
            RunReaction(component="zoom_create_meeting", identity_id="id-1", params={"topic": "x"})
        )

        assert result.result.response.status == 201
        executor.execute.assert_awaited_once_with("id-1", principal.user_id, {"topic": "x"})
