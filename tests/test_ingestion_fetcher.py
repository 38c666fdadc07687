"""Tests for the remote source fetcher."""

from urllib.parse import parse_qs

import httpx
import pytest

from vn_admin.core.errors import TransportError
from vn_admin.ingestion.fetcher import Fetcher
from vn_admin.ingestion.source import SourceConfig


def _source() -> SourceConfig:
    return SourceConfig(
        provinces_url="https://example.test/provinces",
        units_url="https://example.test/units",
        origin="https://example.test",
        referer="https://example.test/map",
        user_agent="test-agent",
    )


def _fetcher(handler, cookie: str = "session=abc") -> Fetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Fetcher(cookie=cookie, source=_source(), client=client)


class TestFetchProvinces:
    """Tests for fetching the province list."""

    @pytest.mark.asyncio
    async def test_parses_list(self) -> None:
        """Test a successful province fetch."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json=[{"id": 1, "tentinh": "Hà Nội", "mahc": 1}, {"id": 2, "tentinh": "Huế"}]
            )

        provinces = await _fetcher(handler).fetch_provinces()
        assert [p.id for p in provinces] == [1, 2]
        assert provinces[0].name == "Hà Nội"
        assert provinces[1].code is None

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        """Test method, URL, form body and identifying headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        await _fetcher(handler).fetch_provinces()

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://example.test/provinces"
        assert parse_qs(request.content.decode()) == {"id": ["0"]}
        assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
        assert request.headers["cookie"] == "session=abc"
        assert request.headers["user-agent"] == "test-agent"
        assert request.headers["origin"] == "https://example.test"
        assert request.headers["referer"] == "https://example.test/map"

    @pytest.mark.asyncio
    async def test_empty_list(self) -> None:
        """Test that an empty list is a valid result."""
        fetcher = _fetcher(lambda request: httpx.Response(200, json=[]))
        assert await fetcher.fetch_provinces() == []


class TestFetchUnits:
    """Tests for fetching a province's units."""

    @pytest.mark.asyncio
    async def test_posts_province_id(self) -> None:
        """Test that the province id is sent as the form field."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json=[{"id": 10, "matinh": 7, "tenhc": "Xã A", "loai": "xã", "ma": "00010"}],
            )

        units = await _fetcher(handler).fetch_units(7)

        assert str(seen[0].url) == "https://example.test/units"
        assert parse_qs(seen[0].content.decode()) == {"id": ["7"]}
        assert len(units) == 1
        assert units[0].province_id == 7
        assert units[0].code == "00010"


class TestFetchErrors:
    """Tests for transport failures."""

    @pytest.mark.asyncio
    async def test_non_success_status(self) -> None:
        """Test that a non-2xx status is a transport error with the status."""
        fetcher = _fetcher(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch_provinces()
        assert exc_info.value.status_code == 503
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        """Test that an unparseable body is a transport error."""
        fetcher = _fetcher(lambda request: httpx.Response(200, text="<html>login</html>"))
        with pytest.raises(TransportError, match="invalid JSON"):
            await fetcher.fetch_provinces()

    @pytest.mark.asyncio
    async def test_non_list_body(self) -> None:
        """Test that a JSON object instead of a list is rejected."""
        fetcher = _fetcher(lambda request: httpx.Response(200, json={"error": "denied"}))
        with pytest.raises(TransportError, match="expected a JSON list"):
            await fetcher.fetch_units(1)

    @pytest.mark.asyncio
    async def test_wrong_item_shape(self) -> None:
        """Test that list items missing required fields are rejected."""
        fetcher = _fetcher(lambda request: httpx.Response(200, json=[{"tentinh": "no id"}]))
        with pytest.raises(TransportError, match="unexpected payload shape"):
            await fetcher.fetch_provinces()

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        """Test that connection failures become transport errors."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="failed") as exc_info:
            await _fetcher(handler).fetch_provinces()
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test that timeouts become transport errors."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError, match="timeout"):
            await _fetcher(handler).fetch_units(1)
