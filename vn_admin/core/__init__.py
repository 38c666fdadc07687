"""Core domain models, errors and settings."""

from vn_admin.core.errors import (
    CacheError,
    IngestionCancelled,
    PersistenceError,
    PipelineError,
    RetriesExhaustedError,
    TransportError,
    VnAdminError,
)
from vn_admin.core.schema import AdminUnit, AdminUnitList, Province, ProvinceList

__all__ = [
    # Errors
    "VnAdminError",
    "TransportError",
    "RetriesExhaustedError",
    "PersistenceError",
    "CacheError",
    "PipelineError",
    "IngestionCancelled",
    # Schema
    "Province",
    "AdminUnit",
    "ProvinceList",
    "AdminUnitList",
]
