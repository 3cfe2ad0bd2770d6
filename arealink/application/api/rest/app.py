import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from arealink.application.api.v1.errors import map_error
from arealink.application.api.v1.routes import auth, health, identities, reactions
from arealink.application.di import create_container
from arealink.config import Config, configure_logging
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.shared.error import AreaLinkError
from arealink.infrastructure.persistence.database import create_tables
from arealink.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    if config.database.auto_migrate:
        engine = await container.get(AsyncEngine)
        await create_tables(engine)

    # Fail fast on incomplete provider credentials
    await container.get(ProviderRegistry)

    yield

    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s server v%s", config.server.name, config.server.version)
    if not config.oauth.state.secret:
        logger.warning("OAuth state secret is empty; set AREALINK_OAUTH__STATE__SECRET")

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    container = create_container(config)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(auth.router, prefix="/api/v1")
    app_instance.include_router(identities.router, prefix="/api/v1")
    app_instance.include_router(reactions.router, prefix="/api/v1")

    # Domain and infrastructure errors -> HTTP responses
    @app_instance.exception_handler(AreaLinkError)
    async def arealink_error_handler(request: Request, exc: AreaLinkError):
        http_exc = map_error(exc)
        if http_exc.status_code >= 500:
            logger.warning(
                "%s %s failed: code=%s, message=%s",
                request.method,
                request.url.path,
                exc.code,
                exc.message,
            )
        return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)

    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance


# App instance for uvicorn (`uvicorn arealink.application.api.rest.app:app`)
# Logfire must be configured before this module is imported
app = create_app()
