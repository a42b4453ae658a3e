# backend/tindesk/routers/health.py
"""
Service info and health probes.

- GET /             - Name, version, docs links
- GET /health       - Database check with details (monitoring)
- GET /health/live  - Process is up (no dependency checks)
- GET /health/ready - Database reachable, safe to route traffic
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tindesk import __version__
from tindesk.config import settings
from tindesk.database import get_db
from tindesk.middleware.rate_limit import limiter, RATE_LIMIT_HEALTH

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def _ping_database(db: Session) -> str | None:
    """Run a trivial query; the failure reason, or None when reachable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database ping failed: {e}")
        return str(e)
    return None


@router.get("/")
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@router.get("/health")
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Detailed health check.

    **Response Status Codes:**
    - 200: Database reachable
    - 503: Database unreachable
    """
    failure = _ping_database(db)
    if failure is not None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "checks": {"database": {"status": "unhealthy", "error": failure}},
            },
        )

    return {
        "status": "healthy",
        "environment": settings.environment,
        "checks": {
            "database": {"status": "healthy", "dialect": db.get_bind().dialect.name},
        },
    }


@router.get("/health/live")
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    return {"status": "alive"}


@router.get("/health/ready")
@limiter.limit(RATE_LIMIT_HEALTH)
def readiness_check(request: Request, db: Session = Depends(get_db)):
    """503 while the database is unreachable."""
    if _ping_database(db) is not None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "error": "Database unavailable"},
        )
    return {"status": "ready"}
