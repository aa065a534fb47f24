"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from scribe.api.deps import SessionDep, SessionStoreDep
from scribe.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    """Health check with database connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected"},
        )


@router.get("/ready")
async def readiness_check(session: SessionDep, store: SessionStoreDep):
    """Readiness check: database and session store must both be reachable.

    Returns 503 if either is unavailable.
    """
    errors = {}

    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database readiness check failed: {e!r}")
        db_status = "disconnected"
        errors["database"] = str(e)

    if await store.ping():
        sessions_status = "connected"
    else:
        sessions_status = "disconnected"
        errors["sessions"] = f"{settings.session_backend} session store unreachable"

    response = {
        "status": "ok" if not errors else "degraded",
        "database": db_status,
        "sessions": sessions_status,
        "session_backend": settings.session_backend,
    }

    if errors:
        return JSONResponse(status_code=503, content=response)
    return response
