"""FastAPI dependencies shared by the routes."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from vn_admin.cache.base import Cache


def get_cache(request: Request) -> Cache:
    """Dependency returning the cache selected at startup."""
    return request.app.state.cache


CacheDep = Annotated[Cache, Depends(get_cache)]


def respond_success(data: object) -> dict:
    """Standard success envelope."""
    return {"data": data}


def respond_error(status_code: int, message: str) -> JSONResponse:
    """Standard error envelope."""
    return JSONResponse(status_code=status_code, content={"error": message})
