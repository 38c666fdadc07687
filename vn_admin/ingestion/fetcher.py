"""
Fetcher Module
==============

Single round-trip HTTP access to the remote source. Each call posts one
form field (``id``) and parses the JSON list in the response. There is no
retry here; see ``vn_admin.ingestion.retry``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from vn_admin.core.errors import TransportError
from vn_admin.core.schema import AdminUnit, AdminUnitList, Province, ProvinceList
from vn_admin.ingestion.source import SourceConfig

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"
PROVINCE_LIST_ID = "0"


class Fetcher:
    """
    Fetches province and unit lists from the remote source.

    Args:
        cookie: Session cookie sent with every request.
        source: Endpoint and header configuration.
        client: Optional shared ``httpx.AsyncClient``. When omitted, a
                short-lived client is opened per request.
    """

    def __init__(
        self,
        cookie: str = "",
        source: SourceConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cookie = cookie
        self.source = source or SourceConfig()
        self._client = client

    @property
    def headers(self) -> dict[str, str]:
        """Identifying headers sent with every request."""
        return {
            "Content-Type": FORM_CONTENT_TYPE,
            "Cookie": self.cookie,
            "User-Agent": self.source.user_agent,
            "Origin": self.source.origin,
            "Referer": self.source.referer,
        }

    async def fetch_provinces(self) -> list[Province]:
        """
        Fetch the full province list.

        Raises:
            TransportError: On network failure, non-2xx status or bad body.
        """
        return await self._post_list(self.source.provinces_url, PROVINCE_LIST_ID, ProvinceList)

    async def fetch_units(self, province_id: int) -> list[AdminUnit]:
        """
        Fetch the administrative units of one province.

        Raises:
            TransportError: On network failure, non-2xx status or bad body.
        """
        return await self._post_list(self.source.units_url, str(province_id), AdminUnitList)

    async def _post_list(self, url: str, form_id: str, adapter: TypeAdapter) -> list[Any]:
        """POST ``id=<form_id>`` to ``url`` and validate the JSON list."""
        try:
            if self._client is not None:
                response = await self._client.post(url, data={"id": form_id}, headers=self.headers)
            else:
                async with httpx.AsyncClient(timeout=self.source.request_timeout) as client:
                    response = await client.post(url, data={"id": form_id}, headers=self.headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"timeout posting to {url}: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"request to {url} failed: {e}") from e

        if not response.is_success:
            raise TransportError(f"API error from {url}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"invalid JSON from {url}: {e}", status_code=response.status_code
            ) from e

        if not isinstance(payload, list):
            raise TransportError(
                f"expected a JSON list from {url}, got {type(payload).__name__}",
                status_code=response.status_code,
            )

        try:
            items = adapter.validate_python(payload)
        except ValidationError as e:
            raise TransportError(
                f"unexpected payload shape from {url}: {e.error_count()} errors",
                status_code=response.status_code,
            ) from e

        logger.debug(f"Fetched {len(items)} records from {url} (id={form_id})")
        return items
