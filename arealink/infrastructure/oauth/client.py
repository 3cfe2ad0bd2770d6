"""Generic OAuth2 authorization-code client."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import httpx

from arealink.domain.identity.model.token import OAuthToken
from arealink.domain.identity.port.provider import AuthorizationResponse
from arealink.domain.shared.error import ExternalServiceError, ValidationError
from arealink.domain.shared.port.clock import Clock
from arealink.infrastructure.oauth.pkce import (
    CODE_CHALLENGE_PLAIN,
    CODE_CHALLENGE_S256,
    derive_code_challenge,
    generate_code_verifier,
    generate_state,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSettings:
    """Endpoints and credentials for one OAuth2 authorization server."""

    name: str
    client_id: str
    client_secret: str
    authorize_url: str
    token_url: str
    scopes: tuple[str, ...] = ()
    prompt: str | None = None
    audience: str | None = None
    token_auth_method: Literal["post", "basic"] = "post"
    token_format: Literal["form", "json"] = "form"
    token_headers: Mapping[str, str] = field(default_factory=dict)
    state_size: int = 32
    verifier_length: int = 64


def _as_int(value: Any) -> int:
    """Read an integer that providers send as a number or a numeric string."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            return 0
    return 0


def _as_scopes(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, Sequence):
        return tuple(str(s) for s in value if str(s).strip())
    return ()


class OAuth2Client:
    """Builds authorization URLs and talks to a token endpoint.

    Supports PKCE (plain/S256), client_secret_post or HTTP Basic client
    authentication, and form or JSON token request bodies.
    """

    def __init__(self, settings: ClientSettings, http_client: httpx.AsyncClient, clock: Clock) -> None:
        self._settings = settings
        self._http = http_client
        self._clock = clock

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def authorization_url(
        self,
        redirect_uri: str,
        *,
        scopes: Sequence[str] = (),
        state: str | None = None,
        prompt: str | None = None,
        use_pkce: bool = False,
        code_verifier: str | None = None,
        challenge_method: str = CODE_CHALLENGE_S256,
        extra: Mapping[str, str] | None = None,
    ) -> AuthorizationResponse:
        """Build the consent URL.

        A state is generated when none is given. PKCE is enabled by
        `use_pkce` or by passing a `code_verifier`.
        """
        redirect_uri = redirect_uri.strip()
        if not redirect_uri:
            raise ValidationError("Redirect URI is required", field="redirect_uri")
        if challenge_method not in (CODE_CHALLENGE_PLAIN, CODE_CHALLENGE_S256):
            raise ValidationError(
                f"Invalid code challenge method: {challenge_method}",
                field="code_challenge_method",
            )

        state = (state or "").strip() or generate_state(self._settings.state_size)
        scopes = tuple(scopes) or self._settings.scopes
        prompt = (prompt or "").strip() or self._settings.prompt

        params: dict[str, str] = {
            "response_type": "code",
            "client_id": self._settings.client_id,
            "redirect_uri": redirect_uri,
            "state": state,
        }
        if scopes:
            params["scope"] = " ".join(scopes)
        if prompt:
            params["prompt"] = prompt
        if self._settings.audience:
            params["audience"] = self._settings.audience

        verifier: str | None = None
        challenge: str | None = None
        if use_pkce or code_verifier:
            verifier = (code_verifier or "").strip() or generate_code_verifier(
                self._settings.verifier_length
            )
            challenge = derive_code_challenge(verifier, challenge_method)
            params["code_challenge"] = challenge
            params["code_challenge_method"] = challenge_method

        for key, value in (extra or {}).items():
            if key.strip() and value:
                params[key] = value

        url = httpx.URL(self._settings.authorize_url).copy_merge_params(params)
        return AuthorizationResponse(
            url=str(url),
            state=state,
            code_verifier=verifier,
            code_challenge=challenge,
            code_challenge_method=challenge_method if verifier else None,
        )

    async def exchange(
        self,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> OAuthToken:
        """Exchange an authorization code at the token endpoint."""
        if not code.strip():
            raise ValidationError("Authorization code is required", field="code")
        if not redirect_uri.strip():
            raise ValidationError("Redirect URI is required", field="redirect_uri")

        values = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri.strip(),
        }
        if code_verifier:
            values["code_verifier"] = code_verifier
        return await self._token_request(values)

    async def refresh(self, refresh_token: str, scopes: Sequence[str] = ()) -> OAuthToken:
        """Redeem a refresh token for a new access token."""
        if not refresh_token.strip():
            raise ExternalServiceError(
                f"{self._settings.name}: refresh token missing",
                code="refresh_token_missing",
            )

        values = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        if scopes:
            values["scope"] = " ".join(scopes)
        return await self._token_request(values)

    async def _token_request(self, values: dict[str, str]) -> OAuthToken:
        headers = {"Accept": "application/json"}
        headers.update({k: v for k, v in self._settings.token_headers.items() if k.strip() and v.strip()})

        auth: httpx.BasicAuth | None = None
        if self._settings.token_auth_method == "basic":
            auth = httpx.BasicAuth(self._settings.client_id, self._settings.client_secret)
        else:
            values["client_id"] = self._settings.client_id
            if self._settings.client_secret:
                values["client_secret"] = self._settings.client_secret

        try:
            if self._settings.token_format == "json":
                response = await self._http.post(
                    self._settings.token_url, json=values, headers=headers, auth=auth
                )
            else:
                response = await self._http.post(
                    self._settings.token_url, data=values, headers=headers, auth=auth
                )
        except httpx.RequestError as e:
            logger.exception("%s token request failed: %s", self._settings.name, e)
            raise ExternalServiceError(
                f"Failed to connect to {self._settings.name}",
                code="oauth_unavailable",
            ) from e

        if not response.is_success:
            raise self._token_error(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"{self._settings.name} token endpoint returned invalid JSON",
                code="oauth_token_error",
            ) from e
        return self.parse_token(payload)

    def parse_token(self, payload: Mapping[str, Any]) -> OAuthToken:
        """Build an OAuthToken from a token endpoint JSON payload.

        `expires_at` (epoch seconds) wins over `expires_in`. `scope` may be a
        space-delimited string or a list.
        """
        if not isinstance(payload, Mapping):
            raise ExternalServiceError(
                f"{self._settings.name} token payload is not an object",
                code="oauth_token_error",
            )
        if payload.get("error"):
            raise ExternalServiceError(
                f"{self._settings.name} token endpoint error: {payload.get('error')}: "
                f"{payload.get('error_description', '')}",
                code="oauth_token_error",
            )

        access_token = str(payload.get("access_token") or "").strip()
        if not access_token:
            raise ExternalServiceError(
                f"{self._settings.name} token response missing access_token",
                code="oauth_token_error",
            )

        expires_at: datetime | None = None
        if (epoch := _as_int(payload.get("expires_at"))) > 0:
            expires_at = datetime.fromtimestamp(epoch, tz=UTC)
        elif (seconds := _as_int(payload.get("expires_in"))) > 0:
            expires_at = self._clock.now() + timedelta(seconds=seconds)

        return OAuthToken(
            access_token=access_token,
            refresh_token=str(payload.get("refresh_token") or "").strip() or None,
            token_type=str(payload.get("token_type") or "Bearer"),
            scopes=_as_scopes(payload.get("scope")),
            expires_at=expires_at,
            id_token=payload.get("id_token") or None,
            raw=dict(payload),
        )

    def _token_error(self, response: httpx.Response) -> ExternalServiceError:
        detail = response.text.strip() or response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, Mapping) and body.get("error"):
            detail = f"{body['error']}: {body.get('error_description', '')}".rstrip(": ")

        logger.error(
            "%s token endpoint error: status=%d, detail=%s",
            self._settings.name,
            response.status_code,
            detail,
        )
        return ExternalServiceError(
            f"{self._settings.name} token endpoint error {response.status_code}: {detail}",
            code="oauth_token_error",
        )


async def fetch_userinfo(
    http_client: httpx.AsyncClient,
    url: str,
    access_token: str,
    *,
    provider: str,
    headers: Mapping[str, str] | None = None,
    user_agent: str = "AREA-Server",
) -> dict[str, Any]:
    """GET a provider's userinfo endpoint with a bearer token."""
    if not access_token.strip():
        raise ExternalServiceError(f"{provider}: access token missing", code="oauth_profile_error")

    request_headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json",
        "User-Agent": user_agent,
    }
    for key, value in (headers or {}).items():
        if key.lower() in ("authorization", "accept", "user-agent"):
            continue
        request_headers[key] = value

    try:
        response = await http_client.get(url, headers=request_headers)
    except httpx.RequestError as e:
        raise ExternalServiceError(
            f"Failed to connect to {provider} userinfo endpoint",
            code="oauth_unavailable",
        ) from e

    if not response.is_success:
        raise ExternalServiceError(
            f"{provider} userinfo status {response.status_code}",
            code="oauth_profile_error",
        )
    try:
        raw = response.json()
    except ValueError as e:
        raise ExternalServiceError(
            f"{provider} userinfo returned invalid JSON", code="oauth_profile_error"
        ) from e
    if not isinstance(raw, dict):
        raise ExternalServiceError(f"{provider} userinfo is not an object", code="oauth_profile_error")
    return raw
