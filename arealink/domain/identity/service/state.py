"""Signed OAuth state: carries PKCE material from the authorize step to the exchange."""

import logging
import time
from dataclasses import dataclass
from typing import Any

import jwt

from arealink.config import OAuthStateConfig
from arealink.domain.shared.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingAuthorization:
    """Values issued at the authorize step that the callback must present again."""

    provider: str
    state: str
    redirect_uri: str | None = None
    code_verifier: str | None = None


class StateService(Service):
    """Signs and verifies pending authorizations as short-lived JWTs.

    The token is handed to the client with the authorization URL, so the
    server keeps no per-login storage between authorize and exchange.
    """

    _config: OAuthStateConfig

    def sign(self, pending: PendingAuthorization) -> str:
        payload: dict[str, Any] = {
            "prv": pending.provider,
            "st": pending.state,
            "exp": int(time.time()) + self._config.ttl_seconds,
        }
        if pending.redirect_uri:
            payload["ru"] = pending.redirect_uri
        if pending.code_verifier:
            payload["cv"] = pending.code_verifier
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: str, state: str) -> PendingAuthorization | None:
        """Decode a signed pending authorization.

        Args:
            token: The signed token returned by sign()
            state: The state echoed by the provider; must match the signed one

        Returns:
            The pending authorization, or None if the token is invalid,
            expired, or was issued for a different state
        """
        try:
            payload = jwt.decode(token, self._config.secret, algorithms=[self._config.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("OAuth state expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning("OAuth state verification failed: %s", e)
            return None

        if not state or payload.get("st") != state:
            logger.warning("OAuth state mismatch")
            return None

        return PendingAuthorization(
            provider=payload["prv"],
            state=payload["st"],
            redirect_uri=payload.get("ru"),
            code_verifier=payload.get("cv"),
        )
