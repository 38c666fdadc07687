"""Liveness and readiness probes."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from vn_admin.core.errors import CacheError, PersistenceError
from vn_admin.db.engine import get_session
from vn_admin.db.repositories import AdminRepository
from vn_admin.web.dependencies import CacheDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/ready", response_model=None)
def ready_check(cache: CacheDep) -> dict | JSONResponse:
    """
    Readiness probe.

    Not ready when the database does not answer. A cache failure only
    degrades the response, since every read can fall back to the store.
    """
    try:
        with get_session() as session:
            AdminRepository(session).ping()
    except PersistenceError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "error": str(e)},
        )

    cache_status = "ok"
    try:
        cache.ping()
    except CacheError as e:
        logger.warning(f"Cache ping failed: {e}")
        cache_status = "degraded"

    return {"status": "ready", "cache": {"backend": cache.backend_name, "status": cache_status}}
