"""Tests for the Zendesk API client."""

import base64
from datetime import date, datetime, timezone

import httpx
import pytest

from zendesk_mcp.config import ZendeskConfig
from zendesk_mcp.models import Article, Ticket
from zendesk_mcp.zendesk_client import (
    ZendeskAPIError,
    ZendeskClient,
    ZendeskNotFoundError,
    date_threshold,
)


@pytest.fixture
def config() -> ZendeskConfig:
    """Create test Zendesk config."""
    return ZendeskConfig(
        subdomain="acme",
        email="agent@acme.com",
        api_token="secret-token",
        request_timeout=10,
    )


class RecordingTransport:
    """Mock transport that records requests and replies from a route table."""

    def __init__(self, routes: dict[str, httpx.Response]):
        self.routes = routes
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, text='{"error":"RecordNotFound"}')
        return response


def search_payload(results: list[dict], count: int | None = None, next_page=None) -> dict:
    return {
        "results": results,
        "count": len(results) if count is None else count,
        "next_page": next_page,
        "previous_page": None,
    }


# =============================================================================
# date_threshold Tests
# =============================================================================

class TestDateThreshold:
    """Tests for the date threshold helper."""

    def test_ninety_days(self):
        """Test 90 days back from a fixed date."""
        assert date_threshold(90, today=date(2024, 6, 30)) == "2024-04-01"

    def test_thirty_days(self):
        assert date_threshold(30, today=date(2024, 6, 30)) == "2024-05-31"

    def test_crosses_year(self):
        assert date_threshold(10, today=date(2024, 1, 5)) == "2023-12-26"

    def test_zero_days(self):
        assert date_threshold(0, today=date(2024, 2, 29)) == "2024-02-29"

    def test_defaults_to_utc_today(self):
        """Test the default date is today in UTC."""
        expected = datetime.now(timezone.utc).date().isoformat()
        assert date_threshold(0) == expected


# =============================================================================
# Client construction and lifecycle
# =============================================================================

class TestClientSetup:
    """Tests for client construction and context management."""

    @pytest.mark.parametrize("field_name", ["subdomain", "email", "api_token"])
    def test_rejects_empty_credentials(self, field_name):
        """Test each required value must be non-empty."""
        values = {"subdomain": "acme", "email": "a@acme.com", "api_token": "t"}
        values[field_name] = ""
        with pytest.raises(ValueError, match=field_name):
            ZendeskClient(ZendeskConfig(**values))

    @pytest.mark.asyncio
    async def test_context_manager(self, config):
        """Test client works as async context manager."""
        async with ZendeskClient(config) as client:
            assert client._client is not None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_request_without_context_raises(self, config):
        """Test requests raise if not in context manager."""
        client = ZendeskClient(config)
        with pytest.raises(RuntimeError, match="context manager"):
            await client.get_ticket(1)

    @pytest.mark.asyncio
    async def test_basic_auth_header(self, config):
        """Test requests carry email/token basic auth."""
        mock = RecordingTransport({
            "/api/v2/tickets/1.json": httpx.Response(200, json={"ticket": {"id": 1}}),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            await client.get_ticket(1)

        expected = base64.b64encode(b"agent@acme.com/token:secret-token").decode()
        request = mock.requests[0]
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.method == "GET"
        assert request.url.host == "acme.zendesk.com"


# =============================================================================
# Endpoint Tests
# =============================================================================

class TestTicketEndpoints:
    """Tests for ticket endpoints."""

    @pytest.mark.asyncio
    async def test_search_tickets_scopes_query(self, config):
        """Test ticket searches are prefixed with type:ticket."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(
                200,
                json=search_payload(
                    [{"id": 1, "subject": "Crash", "tags": ["bug"]}],
                    count=12,
                    next_page="https://acme.zendesk.com/api/v2/search.json?page=2",
                ),
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            result = await client.search_tickets("status:open", page=2, per_page=25)

        params = mock.requests[0].url.params
        assert params["query"] == "type:ticket status:open"
        assert params["page"] == "2"
        assert params["per_page"] == "25"
        assert result.count == 12
        assert result.has_more is True
        assert isinstance(result.results[0], Ticket)

    @pytest.mark.asyncio
    async def test_get_ticket(self, config):
        mock = RecordingTransport({
            "/api/v2/tickets/42.json": httpx.Response(
                200,
                json={"ticket": {"id": 42, "subject": "Hello", "status": "open"}},
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            ticket = await client.get_ticket(42)

        assert ticket.id == 42
        assert ticket.status == "open"

    @pytest.mark.asyncio
    async def test_get_ticket_not_found(self, config):
        """Test 404 raises ZendeskNotFoundError with status and body."""
        mock = RecordingTransport({})
        async with ZendeskClient(config, transport=mock.transport) as client:
            with pytest.raises(ZendeskNotFoundError) as exc_info:
                await client.get_ticket(999)

        assert exc_info.value.status_code == 404
        assert "RecordNotFound" in exc_info.value.body
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_ticket_comments_preserves_order(self, config):
        """Test comments come back in API order."""
        mock = RecordingTransport({
            "/api/v2/tickets/7/comments.json": httpx.Response(
                200,
                json={"comments": [
                    {"id": 3, "body": "first", "author_id": 1, "public": True},
                    {"id": 1, "body": "second", "author_id": 2, "public": False},
                ]},
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            comments = await client.get_ticket_comments(7)

        assert [c.id for c in comments] == [3, 1]
        assert comments[1].public is False

    @pytest.mark.asyncio
    async def test_get_tickets_by_tag(self, config):
        """Test tag search builds a tags: query."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(200, json=search_payload([])),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            await client.get_tickets_by_tag("collections")

        params = mock.requests[0].url.params
        assert params["query"] == "type:ticket tags:collections"
        assert params["page"] == "1"
        assert params["per_page"] == "50"

    @pytest.mark.asyncio
    async def test_get_recent_tickets(self, config):
        """Test recent tickets look back 30 days."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(200, json=search_payload([])),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            await client.get_recent_tickets(today=date(2024, 6, 30))

        assert mock.requests[0].url.params["query"] == "type:ticket created>2024-05-31"


class TestArticleEndpoints:
    """Tests for Help Center endpoints."""

    @pytest.mark.asyncio
    async def test_search_articles(self, config):
        """Test article search passes the query unscoped."""
        mock = RecordingTransport({
            "/api/v2/help_center/articles/search.json": httpx.Response(
                200,
                json=search_payload([{"id": 5, "title": "Guide"}]),
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            result = await client.search_articles("route planning", per_page=10)

        params = mock.requests[0].url.params
        assert params["query"] == "route planning"
        assert params["per_page"] == "10"
        assert isinstance(result.results[0], Article)

    @pytest.mark.asyncio
    async def test_get_article(self, config):
        mock = RecordingTransport({
            "/api/v2/help_center/articles/5.json": httpx.Response(
                200,
                json={"article": {"id": 5, "title": "Guide", "html_url": "https://x/5"}},
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            article = await client.get_article(5)

        assert article.title == "Guide"
        assert article.html_url == "https://x/5"

    @pytest.mark.asyncio
    async def test_search_all_is_unscoped(self, config):
        """Test search_all does not add a type filter."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(
                200,
                json=search_payload([{"id": 1, "result_type": "user"}]),
            ),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            result = await client.search_all("collections")

        assert mock.requests[0].url.params["query"] == "collections"
        assert result.results[0]["result_type"] == "user"


class TestErrorHandling:
    """Tests for error normalization."""

    @pytest.mark.asyncio
    async def test_server_error(self, config):
        """Test non-2xx responses raise ZendeskAPIError."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(500, text="Internal Server Error"),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            with pytest.raises(ZendeskAPIError) as exc_info:
                await client.search_tickets("anything")

        assert not isinstance(exc_info.value, ZendeskNotFoundError)
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "Zendesk API error (500): Internal Server Error"

    @pytest.mark.asyncio
    async def test_rate_limited_is_not_retried(self, config):
        """Test a 429 surfaces immediately after a single request."""
        mock = RecordingTransport({
            "/api/v2/search.json": httpx.Response(429, text="Too Many Requests"),
        })
        async with ZendeskClient(config, transport=mock.transport) as client:
            with pytest.raises(ZendeskAPIError, match="429"):
                await client.search_tickets("anything")

        assert len(mock.requests) == 1

    @pytest.mark.asyncio
    async def test_transport_error(self, config):
        """Test connection failures are wrapped."""
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with ZendeskClient(config, transport=httpx.MockTransport(fail)) as client:
            with pytest.raises(ZendeskAPIError, match="Request failed") as exc_info:
                await client.get_article(1)

        assert exc_info.value.status_code is None
