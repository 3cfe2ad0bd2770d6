"""Zoom "create meeting" reaction."""

import json
import logging
import re
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx
import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.port.repository import IdentityRepository
from arealink.domain.identity.service.freshness import TokenFreshnessGuard
from arealink.domain.reaction.model.result import ReactionResult, RecordedRequest, RecordedResponse
from arealink.domain.reaction.service.executor import ResilientActionExecutor
from arealink.domain.shared.error import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

CREATE_MEETING_ENDPOINT = "https://api.zoom.us/v2/users/{user_id}/meetings"
INSTANT_MEETING = 1
SCHEDULED_MEETING = 2
RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


class MeetingRequest(BaseModel):
    """Parameters of a Zoom meeting, as accepted from reaction configs."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    user_id: str = Field(default="me", alias="userId")
    topic: str = Field(min_length=1, max_length=200)
    start_time: str | None = Field(default=None, alias="startTime")
    time_zone: str | None = Field(default=None, alias="timeZone")
    duration: int = 0  # Minutes; 0 = let Zoom decide
    agenda: str | None = Field(default=None, max_length=2000)
    password: str | None = Field(default=None, max_length=10)

    @field_validator("user_id", mode="before")
    @classmethod
    def default_user(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "me"
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def blank_duration(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v

    @field_validator("duration")
    @classmethod
    def duration_in_bounds(cls, v: int) -> int:
        if v != 0 and not 1 <= v <= 1440:
            raise ValueError("duration must be between 1 and 1440 minutes")
        return v

    @field_validator("start_time")
    @classmethod
    def rfc3339(cls, v: str | None) -> str | None:
        if not v:
            return None
        if not RFC3339_PATTERN.fullmatch(v):
            raise ValueError("startTime must be an RFC 3339 timestamp")
        try:
            datetime.fromisoformat(v)
        except ValueError as e:
            raise ValueError("startTime must be an RFC 3339 timestamp") from e
        return v

    @property
    def meeting_type(self) -> int:
        return SCHEDULED_MEETING if self.start_time else INSTANT_MEETING

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"topic": self.topic, "type": self.meeting_type}
        if self.start_time:
            body["start_time"] = self.start_time
        if self.time_zone:
            body["timezone"] = self.time_zone
        if self.duration > 0:
            body["duration"] = self.duration
        if self.agenda:
            body["agenda"] = self.agenda
        if self.password:
            body["password"] = self.password
        return body


def _redact(headers: Mapping[str, str]) -> dict[str, str]:
    return {k: ("Bearer ***" if k.lower() == "authorization" else v) for k, v in headers.items()}


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ZoomMeetingExecutor(ResilientActionExecutor[MeetingRequest]):
    """Creates a Zoom meeting with the caller's linked Zoom identity."""

    component = "zoom_create_meeting"
    provider = "zoom"

    def __init__(
        self,
        identity_repo: IdentityRepository,
        freshness: TokenFreshnessGuard,
        http_client: httpx.AsyncClient,
        user_agent: str = "AREA-Server",
    ) -> None:
        super().__init__(identity_repo, freshness)
        self._http = http_client
        self._user_agent = user_agent

    def parse_params(self, params: Mapping[str, Any]) -> MeetingRequest:
        try:
            return MeetingRequest.model_validate(dict(params or {}))
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or None
            raise ValidationError(f"Invalid {field or 'parameters'}: {first['msg']}", field=field) from e

    async def attempt(
        self, identity: Identity, access_token: str, request: MeetingRequest
    ) -> ReactionResult:
        endpoint = CREATE_MEETING_ENDPOINT.format(user_id=quote(request.user_id, safe=""))
        body = request.payload()
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }

        started = time.perf_counter()
        try:
            response = await self._http.post(endpoint, content=json.dumps(body), headers=headers)
        except httpx.RequestError as e:
            logger.error("Zoom request failed: identity_id=%s, error=%s", identity.id, e)
            raise ExternalServiceError("Failed to connect to Zoom", code="zoom_unavailable") from e
        duration_ms = (time.perf_counter() - started) * 1000

        response_body = _decode_body(response)
        output: dict[str, Any] = {}
        if response.is_success and isinstance(response_body, dict):
            output = {
                "meeting_id": response_body.get("id"),
                "join_url": response_body.get("join_url"),
            }
            logger.info(
                "Zoom meeting created: identity_id=%s, zoom_user=%s, meeting_id=%s, topic=%s",
                identity.id,
                request.user_id,
                output["meeting_id"],
                request.topic,
            )

        return ReactionResult(
            component=self.component,
            provider=self.provider,
            identity_id=str(identity.id),
            endpoint=endpoint,
            request=RecordedRequest(method="POST", url=endpoint, headers=_redact(headers), body=body),
            response=RecordedResponse(
                status=response.status_code,
                headers=dict(response.headers),
                body=response_body,
            ),
            duration_ms=duration_ms,
            output=output,
        )
