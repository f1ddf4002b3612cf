"""
market_auth.api.app

FastAPI app factory for the marketplace auth service.

Responsibilities:
- Build the FastAPI application and register routers.
- Wire the MarketAuthClient (stores, token codec, policy) onto app.state.
- Render every MarketAuthError as `{success: false, message, errors?}`.
- Render malformed request bodies the same way, as a 400 ValidationError.
- Provision the bootstrap admin on startup when configured.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from market_auth.api.routers.admin import router as admin_router
from market_auth.api.routers.auth import router as auth_router
from market_auth.api.routers.entities import router as entities_router
from market_auth.api.routers.identities import router as identities_router
from market_auth.config import Settings, get_settings
from market_auth.errors import MarketAuthError, ValidationError
from market_auth.observability.logging import configure_logging, get_logger
from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.document_port import DocumentStorePort
from market_auth.sdk.client import MarketAuthClient

log = get_logger(__name__)


def create_app(
    *,
    settings: Optional[Settings] = None,
    credentials: Optional[CredentialStorePort] = None,
    documents: Optional[DocumentStorePort] = None,
) -> FastAPI:
    settings = settings or get_settings()
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    client = MarketAuthClient.from_settings(settings, credentials=credentials, documents=documents)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        if await client.bootstrap_admin(settings):
            log.info("bootstrap_admin_created", email=settings.bootstrap_admin_email)
        yield
        log.info("shutdown")

    app = FastAPI(
        title="Marketplace Auth",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.auth = client

    app.add_exception_handler(MarketAuthError, _market_auth_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(identities_router)
    app.include_router(entities_router)

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


async def _market_auth_error_handler(request: Request, exc: MarketAuthError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        log.warning("request_failed", path=request.url.path, status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [_describe(error) for error in exc.errors()]
    return await _market_auth_error_handler(request, ValidationError(errors))


def _describe(error: dict) -> str:
    # Drop the "body"/"query" prefix FastAPI puts on every location
    loc = [str(part) for part in error.get("loc", ())[1:]]
    message = error.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {message}" if loc else message
