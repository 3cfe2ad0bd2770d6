"""Principal: the authenticated caller, resolved per request from the session cookie."""

from dataclasses import dataclass

from arealink.domain.identity.model.value import SessionId, UserId


@dataclass(frozen=True)
class Principal:
    user_id: UserId
    session_id: SessionId
