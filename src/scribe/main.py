"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scribe import __version__
from scribe.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from scribe.api.router import api_router
from scribe.config import settings
from scribe.database import close_db
from scribe.services.email import email_service
from scribe.services.sessions import get_session_store

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    if not settings.sentry_dsn:
        return

    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"scribe@{__version__}",
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Schema is managed by Alembic migrations
    yield
    # Queued emails go out before connections close
    await email_service.drain()
    await get_session_store().close()
    await close_db()


async def unhandled_error(request: Request, _exc: Exception) -> JSONResponse:
    """Last-resort handler: a 500 tagged with the request ID.

    The traceback is already logged by ``RequestLoggingMiddleware``.
    """
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "request_id": request_id},
        headers=headers,
    )


def create_app() -> FastAPI:
    init_sentry()

    app = FastAPI(
        title="Scribe API",
        description="Blog backend with session-based accounts",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug_enabled else None,
        redoc_url="/api/redoc" if settings.debug_enabled else None,
        openapi_url="/api/openapi.json" if settings.debug_enabled else None,
    )
    app.add_exception_handler(Exception, unhandled_error)

    app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]
    # Added after the logging middleware so it runs outside it and the ID is set first
    app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

    # The session cookie is a credential, so CORS must allow credentials
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from scribe.logging import get_uvicorn_log_config

    uvicorn.run(
        "scribe.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )
