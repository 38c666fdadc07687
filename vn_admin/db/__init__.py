"""Database initialization and persistence layer."""

from vn_admin.db.engine import (
    create_db_engine,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    reset_engine,
)
from vn_admin.db.models import AdminUnitDB, Base, ProvinceDB
from vn_admin.db.repositories import AdminRepository

__all__ = [
    # Engine
    "create_db_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "reset_engine",
    # Models
    "Base",
    "ProvinceDB",
    "AdminUnitDB",
    # Repositories
    "AdminRepository",
]
