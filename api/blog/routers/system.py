"""System endpoints (health, database status)."""

from __future__ import annotations

import logging
import time

from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from .. import schemas
from ..db import get_engine

router = APIRouter(prefix="", tags=["System"])
logger = logging.getLogger(__name__)

# Global startup time for uptime calculation
_STARTUP_TIME = time.time()


@router.get("/health", response_model=schemas.HealthResponse)
def get_health() -> schemas.HealthResponse:
    """Liveness check."""
    uptime_s = time.time() - _STARTUP_TIME
    return schemas.HealthResponse(status="ok", uptime_s=uptime_s)


@router.get("/db-status", response_model=schemas.DbStatusResponse)
def get_db_status() -> schemas.DbStatusResponse:
    """
    Database connectivity and migration state.

    Returns 503 if the database cannot be reached.
    """
    from ..main import alembic_config

    engine = get_engine()
    try:
        with engine.connect() as connection:
            current_heads = MigrationContext.configure(connection).get_current_heads()
    except SQLAlchemyError as e:
        logger.error(f"Database status check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        )

    script_heads = ScriptDirectory.from_config(alembic_config()).get_heads()
    current_rev = current_heads[0] if len(current_heads) == 1 else None
    head_rev = script_heads[0] if len(script_heads) == 1 else None
    pending = set(current_heads) != set(script_heads)

    return schemas.DbStatusResponse(
        connected=True,
        database=engine.url.database,
        current_revision=current_rev,
        head_revision=head_rev,
        pending_migrations=pending,
        status="Unhealthy" if pending else "Healthy",
    )
