"""Unit tests for base_client module."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from clinical_daily.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    RateLimitError,
)


class ConcreteTestClient(BaseClient):
    """Concrete implementation of BaseClient for testing."""

    @property
    def _source_name(self) -> str:
        return "test_client"


def _resp(status: int, body: str = "", headers: dict | None = None) -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=body)
    resp.headers = headers or {}
    return resp


def _session(*responses) -> AsyncMock:
    session = AsyncMock()
    session.get = AsyncMock(side_effect=list(responses))
    return session


@pytest.mark.asyncio
class TestBaseClient:
    """Unit tests for BaseClient session lifecycle (no network calls)."""

    async def test_client_context_manager(self):
        """Test that client can be used as async context manager."""
        async with ConcreteTestClient() as client:
            assert client._session is None  # Session created lazily
            session = await client._get_session()

            assert session is not None
            assert not session.closed

        # Session should be closed after exiting context
        assert client._session.closed

    async def test_session_reuse(self):
        """Test that session is reused across requests."""
        client = ConcreteTestClient()

        session1 = await client._get_session()
        session2 = await client._get_session()

        assert session1 is session2
        await client.close()

    async def test_session_uses_configured_timeout(self):
        client = ConcreteTestClient(config=ClientConfig(timeout_seconds=12.5))

        session = await client._get_session()

        assert session.timeout.total == 12.5
        await client.close()

    async def test_max_retries_override(self):
        client = ConcreteTestClient(max_retries=0)

        assert client.config.retry.max_retries == 0
        assert client.config.retry.retryable_status_codes == {429, 500, 502, 503, 504}


@pytest.mark.asyncio
class TestRestGetXml:
    """Unit tests for _rest_get_xml."""

    async def test_returns_xml_text_on_success(self):
        """Test _rest_get_xml returns raw text for a 200 response."""
        xml_body = (
            "<PubmedArticleSet><PubmedArticle></PubmedArticle></PubmedArticleSet>"
        )
        mock_session = _session(_resp(200, xml_body))

        client = ConcreteTestClient()
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            result = await client._rest_get_xml(
                "https://example.com/xml", params={"id": "1"}
            )

        assert result == xml_body
        mock_session.get.assert_awaited_once_with(
            "https://example.com/xml", params={"id": "1"}, headers=None
        )

    async def test_raises_datasource_error_on_4xx(self):
        """Test _rest_get_xml raises DataSourceError for non-retryable 4xx."""
        mock_session = _session(_resp(404, "Not Found"))

        client = ConcreteTestClient(max_retries=0)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with pytest.raises(DataSourceError, match="HTTP 404") as exc_info:
                await client._rest_get_xml("https://example.com/xml", params={})

        assert exc_info.value.status_code == 404
        assert exc_info.value.source == "test_client"

    async def test_retries_on_5xx_then_succeeds(self):
        """Test _rest_get_xml retries on 500 and succeeds on next attempt."""
        mock_session = _session(_resp(500), _resp(200, "<root>OK</root>"))

        client = ConcreteTestClient(max_retries=1)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with patch(
                "clinical_daily.data_sources.base_client.asyncio.sleep",
                new_callable=AsyncMock,
            ):
                result = await client._rest_get_xml(
                    "https://example.com/xml", params={}
                )

        assert result == "<root>OK</root>"
        assert mock_session.get.call_count == 2

    async def test_raises_after_exhausting_retries_on_5xx(self):
        """Test _rest_get_xml raises DataSourceError after all retries fail with 5xx."""
        mock_session = _session(_resp(503), _resp(503), _resp(503))

        client = ConcreteTestClient(max_retries=2)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with patch(
                "clinical_daily.data_sources.base_client.asyncio.sleep",
                new_callable=AsyncMock,
            ):
                with pytest.raises(DataSourceError, match="HTTP 503") as exc_info:
                    await client._rest_get_xml("https://example.com/xml", params={})

        assert exc_info.value.status_code == 503
        assert mock_session.get.call_count == 3

    async def test_429_honours_retry_after(self):
        """Test a 429 sleeps for Retry-After seconds before retrying."""
        mock_session = _session(
            _resp(429, headers={"Retry-After": "2"}), _resp(200, "<ok/>")
        )

        client = ConcreteTestClient(max_retries=1)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with patch(
                "clinical_daily.data_sources.base_client.asyncio.sleep",
                new_callable=AsyncMock,
            ) as mock_sleep:
                result = await client._rest_get_xml("https://example.com/xml", params={})

        assert result == "<ok/>"
        mock_sleep.assert_any_await(2.0)

    async def test_429_exhausted_raises_rate_limit_error(self):
        mock_session = _session(_resp(429))

        client = ConcreteTestClient(max_retries=0)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with pytest.raises(RateLimitError) as exc_info:
                await client._rest_get_xml("https://example.com/xml", params={})

        assert exc_info.value.status_code == 429

    async def test_timeout_then_success(self):
        mock_session = AsyncMock()
        mock_session.get = AsyncMock(
            side_effect=[asyncio.TimeoutError(), _resp(200, "<ok/>")]
        )

        client = ConcreteTestClient(max_retries=1)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with patch(
                "clinical_daily.data_sources.base_client.asyncio.sleep",
                new_callable=AsyncMock,
            ):
                result = await client._rest_get_xml("https://example.com/xml", params={})

        assert result == "<ok/>"

    async def test_connection_error_exhausted(self):
        mock_session = AsyncMock()
        mock_session.get = AsyncMock(
            side_effect=aiohttp.ClientConnectionError("refused")
        )

        client = ConcreteTestClient(max_retries=1)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with patch(
                "clinical_daily.data_sources.base_client.asyncio.sleep",
                new_callable=AsyncMock,
            ):
                with pytest.raises(DataSourceError, match="Connection error"):
                    await client._rest_get_xml("https://example.com/xml", params={})

        assert mock_session.get.call_count == 2

    async def test_undecodable_body_raises_without_retry(self):
        resp = _resp(200)
        resp.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        )
        mock_session = _session(resp)

        client = ConcreteTestClient(max_retries=2)
        with patch.object(
            client, "_get_session", new_callable=AsyncMock, return_value=mock_session
        ):
            with pytest.raises(DataSourceError, match="Undecodable response body"):
                await client._rest_get_xml("https://example.com/xml", params={})

        assert mock_session.get.call_count == 1


@pytest.mark.asyncio
class TestRestGet:
    """Unit tests for _rest_get JSON handling."""

    async def test_parses_json_object(self):
        client = ConcreteTestClient()
        with patch.object(
            client, "_request", new_callable=AsyncMock, return_value='{"a": 1}'
        ):
            assert await client._rest_get("https://example.com", {}) == {"a": 1}

    async def test_malformed_json_raises(self):
        client = ConcreteTestClient()
        with patch.object(
            client, "_request", new_callable=AsyncMock, return_value="<html>"
        ):
            with pytest.raises(DataSourceError, match="Malformed JSON"):
                await client._rest_get("https://example.com", {})

    async def test_non_object_json_raises(self):
        client = ConcreteTestClient()
        with patch.object(
            client, "_request", new_callable=AsyncMock, return_value="[1, 2]"
        ):
            with pytest.raises(DataSourceError, match="Expected a JSON object"):
                await client._rest_get("https://example.com", {})


class TestDataSourceError:
    """Tests for DataSourceError."""

    def test_error_message_format(self):
        """Test error message includes source."""
        error = DataSourceError("pubmed", "Connection failed")
        assert "[pubmed]" in str(error)
        assert "Connection failed" in str(error)

    def test_error_with_status_code(self):
        """Test error can include status code."""
        error = DataSourceError("api", "Not found", status_code=404)
        assert error.source == "api"
        assert error.status_code == 404
