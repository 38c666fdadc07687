"""Read API for provinces and administrative units.

Province and unit lists are served cache-first. A cache miss and a cache
error are handled the same way: read the store, then try to repopulate
the cache without letting a cache failure reach the client.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from vn_admin.core.errors import CacheError, PersistenceError
from vn_admin.db.engine import get_session
from vn_admin.db.repositories import AdminRepository
from vn_admin.web.dependencies import CacheDep, respond_error, respond_success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["provinces"])

MIN_QUERY_LENGTH = 2


def _parse_int(value: str) -> int | None:
    """Parse a string to int, returning None when it is not a number."""
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


@router.get("/provinces", response_model=None)
def list_provinces(cache: CacheDep) -> dict | JSONResponse:
    """All provinces ordered by id."""
    cached, hit = cache.get_provinces()
    if hit:
        return respond_success([p.model_dump(mode="json") for p in cached])

    try:
        with get_session() as session:
            provinces = AdminRepository(session).list_provinces()
    except PersistenceError as e:
        logger.error(f"Failed to get provinces: {e}")
        return respond_error(500, "Internal Server Error")

    try:
        cache.set_provinces(provinces)
    except CacheError as e:
        logger.warning(f"Could not cache provinces: {e}")

    return respond_success([p.model_dump(mode="json") for p in provinces])


@router.get("/provinces/{province_id}/units", response_model=None)
def list_units(province_id: str, cache: CacheDep) -> dict | JSONResponse:
    """Units of one province ordered by id."""
    pid = _parse_int(province_id)
    if pid is None:
        return respond_error(400, "Invalid Province ID")

    cached, hit = cache.get_units(pid)
    if hit:
        return respond_success([u.model_dump(mode="json") for u in cached])

    try:
        with get_session() as session:
            units = AdminRepository(session).list_units_by_province(pid)
    except PersistenceError as e:
        logger.error(f"Failed to get units for province {pid}: {e}")
        return respond_error(500, "Internal Server Error")

    try:
        cache.set_units(pid, units)
    except CacheError as e:
        logger.warning(f"Could not cache units for province {pid}: {e}")

    return respond_success([u.model_dump(mode="json") for u in units])


@router.get("/search", response_model=None)
def search_units(q: str = "") -> dict | JSONResponse:
    """Substring search over unit names and pre-merger descriptions."""
    query = q.strip()
    if len(query) < MIN_QUERY_LENGTH:
        return respond_error(400, f"Query too short (min {MIN_QUERY_LENGTH} chars)")

    try:
        with get_session() as session:
            units = AdminRepository(session).search_units(query)
    except PersistenceError as e:
        logger.error(f"Failed to search units for {query!r}: {e}")
        return respond_error(500, "Internal Server Error")

    return respond_success([u.model_dump(mode="json") for u in units])
