# backend/tindesk/database.py
"""
Engine and session factory.

SQLite (tests, local runs) gets a StaticPool so one in-memory database is
shared by every session; anything else gets a QueuePool sized from settings.
Services never touch the engine: they are handed a Session by the caller
(get_db for HTTP, SessionLocal for the CLI).
"""

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool

from tindesk.config import settings

logger = logging.getLogger(__name__)


def _pool_options() -> dict[str, Any]:
    if settings.is_sqlite:
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_pool_max_overflow,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_timeout": 30,
    }


def _create_engine() -> Engine:
    options = _pool_options()
    logger.info(
        f"Creating database engine with {options['poolclass'].__name__}",
        extra={"pool": {k: v for k, v in options.items() if k.startswith(("pool_", "max_"))}},
    )
    return create_engine(settings.database_url, echo=settings.debug, **options)


engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session, closed when the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
