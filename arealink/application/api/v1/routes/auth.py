"""Authentication routes for the OAuth authorization-code flow."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Request, Response
from pydantic import BaseModel

from arealink.config import Config
from arealink.domain.identity.command.login import (
    BeginAuthorization,
    BeginAuthorizationHandler,
    BeginAuthorizationResult,
    CompleteOAuth,
    CompleteOAuthHandler,
    LinkIdentity,
    LinkIdentityHandler,
    LinkIdentityResult,
)
from arealink.domain.identity.port.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"], route_class=DishkaRoute)


class ProvidersResponse(BaseModel):
    providers: list[str]


class ExchangeRequestBody(BaseModel):
    """Request body for the code exchange."""

    code: str
    redirect_uri: str | None = None
    code_verifier: str | None = None
    state: str | None = None
    state_token: str | None = None


class LoginResponse(BaseModel):
    user_id: str
    email: str
    session_expires_at: datetime
    identity_id: str
    provider: str


@router.get("/providers")
async def list_providers(registry: FromDishka[ProviderRegistry]) -> ProvidersResponse:
    """Names of the OAuth providers users can link."""
    return ProvidersResponse(providers=registry.available_providers())


@router.get("/{provider}/authorize")
async def authorize(
    provider: str,
    handler: FromDishka[BeginAuthorizationHandler],
    redirect_uri: Annotated[str | None, Query()] = None,
    scope: Annotated[list[str] | None, Query()] = None,
) -> BeginAuthorizationResult:
    """Build the provider consent URL.

    The client opens `authorization_url` and sends `state_token` back with
    the code on exchange.
    """
    result = await handler.run(
        BeginAuthorization(provider=provider, redirect_uri=redirect_uri, scopes=scope or [])
    )
    logger.info("OAuth authorization started: provider=%s", result.provider)
    return result


@router.post("/{provider}/exchange")
async def exchange(
    provider: str,
    body: ExchangeRequestBody,
    request: Request,
    response: Response,
    config: FromDishka[Config],
    handler: FromDishka[CompleteOAuthHandler],
) -> LoginResponse:
    """Exchange an authorization code, link the identity, and set the session cookie."""
    result = await handler.run(
        CompleteOAuth(
            provider=provider,
            code=body.code,
            redirect_uri=body.redirect_uri,
            code_verifier=body.code_verifier,
            state=body.state,
            state_token=body.state_token,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    )

    max_age = int((result.session_expires_at - datetime.now(UTC)).total_seconds())
    response.set_cookie(
        key=result.cookie_name,
        value=result.session_id,
        max_age=max(max_age, 0),
        httponly=config.session.http_only,
        secure=config.session.secure,
        samesite=config.session.same_site,
    )
    return LoginResponse(
        user_id=result.user_id,
        email=result.email,
        session_expires_at=result.session_expires_at,
        identity_id=result.identity_id,
        provider=result.provider,
    )


@router.post("/{provider}/link")
async def link(
    provider: str,
    body: ExchangeRequestBody,
    handler: FromDishka[LinkIdentityHandler],
) -> LinkIdentityResult:
    """Link another provider account to the signed-in user."""
    return await handler.run(
        LinkIdentity(
            provider=provider,
            code=body.code,
            redirect_uri=body.redirect_uri,
            code_verifier=body.code_verifier,
            state=body.state,
            state_token=body.state_token,
        )
    )
