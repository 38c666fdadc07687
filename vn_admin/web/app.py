"""FastAPI application factory for the province/unit API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vn_admin import __version__
from vn_admin.cache import Cache, create_cache
from vn_admin.core.settings import get_settings, load_env_file
from vn_admin.db.engine import init_db

logger = logging.getLogger(__name__)


def create_app(cache: Cache | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        cache: Cache backend to use. When omitted, one is selected from
               settings (Redis if reachable, otherwise in-memory).
    """
    load_env_file()
    settings = get_settings()

    # Initialize database tables
    init_db()

    active_cache = cache or create_cache(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.cache.close()
        logger.info("Server exited properly")

    app = FastAPI(
        title="VN Admin API",
        description="Vietnamese provinces and administrative units after the 2025 merger",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.cache = active_cache

    # Include routers (import here to avoid circular imports)
    from vn_admin.web.routes import health, provinces

    app.include_router(health.router)
    app.include_router(provinces.router)

    return app
