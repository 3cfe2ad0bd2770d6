"""Outcome records for reaction executions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class AttemptOutcome(Enum):
    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"  # Provider rejected the access token
    FAILED = "failed"

    @classmethod
    def classify(cls, status: int) -> "AttemptOutcome":
        """Classify an HTTP status code returned by a provider API."""
        if 200 <= status < 300:
            return cls.SUCCESS
        if status in (401, 403):
            return cls.UNAUTHORIZED
        return cls.FAILED


class RecordedRequest(BaseModel):
    method: str
    url: str
    headers: dict[str, str] = {}
    body: Any = None


class RecordedResponse(BaseModel):
    status: int
    headers: dict[str, str] = {}
    body: Any = None


class ReactionResult(BaseModel):
    """Audit record of one outbound call made on a user's behalf.

    Secrets (bearer tokens) are redacted from `request.headers`.
    """

    component: str
    provider: str
    identity_id: str
    endpoint: str
    request: RecordedRequest
    response: RecordedResponse
    duration_ms: float
    attempts: int = 1
    output: dict[str, Any] = {}  # Component-specific fields extracted from the response

    @property
    def outcome(self) -> AttemptOutcome:
        return AttemptOutcome.classify(self.response.status)
