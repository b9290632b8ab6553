"""
Zendesk REST API client for the Zendesk MCP Server.

Responsible for retrieving data from the Zendesk API:
- Ticket search, single tickets and ticket comments
- Help Center article search and single articles
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from .config import ZendeskConfig
from .models import Article, Comment, SearchResult, Ticket


logger = logging.getLogger(__name__)


def date_threshold(days_back: int, today: Optional[date] = None) -> str:
    """
    Compute the date ``days_back`` days before today (UTC).

    Args:
        days_back: Number of days to look back.
        today: Override for the current UTC date.

    Returns:
        The threshold date formatted as YYYY-MM-DD.
    """
    if today is None:
        today = datetime.now(timezone.utc).date()
    return (today - timedelta(days=days_back)).isoformat()


class ZendeskError(Exception):
    """Base exception for Zendesk client errors."""
    pass


class ZendeskAPIError(ZendeskError):
    """Error when communicating with the Zendesk API."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ZendeskAPIError":
        """Build an error carrying the status code and raw body of a failed response."""
        return cls(
            f"Zendesk API error ({response.status_code}): {response.text}",
            status_code=response.status_code,
            body=response.text,
        )


class ZendeskNotFoundError(ZendeskAPIError):
    """The requested ticket or article does not exist (404)."""
    pass


class ZendeskClient:
    """
    Async client for the Zendesk Support and Help Center APIs.

    Authenticates with an API token using HTTP Basic auth. Every method
    issues a single GET request; nothing is retried or cached.

    Usage:
        async with ZendeskClient(config) as client:
            results = await client.search_tickets("status:open")
    """

    def __init__(
        self,
        config: ZendeskConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Zendesk client.

        Args:
            config: Zendesk configuration with subdomain and credentials.
            transport: Optional httpx transport (used in tests).

        Raises:
            ValueError: If subdomain, email or API token is empty.
        """
        for name in ("subdomain", "email", "api_token"):
            if not getattr(config, name):
                raise ValueError(f"Zendesk {name} must not be empty")

        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ZendeskClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            auth=httpx.BasicAuth(self._config.auth_username, self._config.api_token),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self._config.request_timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> dict:
        """
        Issue a GET request and decode the JSON body.

        Args:
            endpoint: Path relative to the API root (e.g. "/search.json").
            params: Query string parameters.

        Returns:
            Decoded JSON object.

        Raises:
            ZendeskNotFoundError: If the API responds with 404.
            ZendeskAPIError: For any other non-success status or transport failure.
        """
        if not self._client:
            raise RuntimeError("Client must be used within an async context manager")

        logger.debug(f"GET {endpoint} params={params}")

        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.RequestError as e:
            logger.error(f"Request error calling {endpoint}: {e}")
            raise ZendeskAPIError(f"Request failed: {e}") from e

        if response.is_error:
            logger.error(f"Zendesk returned {response.status_code} for {endpoint}")
            if response.status_code == 404:
                raise ZendeskNotFoundError.from_response(response)
            raise ZendeskAPIError.from_response(response)

        return response.json()

    @staticmethod
    def _page_params(query: str, page: int, per_page: int) -> dict[str, str]:
        return {
            "query": query,
            "per_page": str(per_page),
            "page": str(page),
        }

    async def search_tickets(
        self,
        query: str,
        page: int = 1,
        per_page: int = 50,
    ) -> SearchResult[Ticket]:
        """
        Search tickets with Zendesk query syntax.

        The query is scoped to tickets, so callers pass only the filter part:
        - "status:open tags:collections"
        - "created>2024-01-01"
        - "subject:bug priority:high"

        Args:
            query: Search query.
            page: Page number, starting at 1.
            per_page: Results per page (Zendesk allows up to 100).

        Returns:
            One page of matching tickets.
        """
        data = await self._request(
            "/search.json",
            self._page_params(f"type:ticket {query}", page, per_page),
        )
        result = SearchResult[Ticket].model_validate(data)
        logger.info(f"Ticket search '{query}' matched {result.count} tickets")
        return result

    async def get_ticket(self, ticket_id: int) -> Ticket:
        """
        Get a specific ticket by ID.

        Raises:
            ZendeskNotFoundError: If the ticket does not exist.
        """
        data = await self._request(f"/tickets/{ticket_id}.json")
        return Ticket.model_validate(data["ticket"])

    async def search_articles(
        self,
        query: str,
        page: int = 1,
        per_page: int = 50,
    ) -> SearchResult[Article]:
        """
        Search Help Center articles.

        Query examples:
        - "collections route planning"
        - "label:feature_name"
        """
        data = await self._request(
            "/help_center/articles/search.json",
            self._page_params(query, page, per_page),
        )
        result = SearchResult[Article].model_validate(data)
        logger.info(f"Article search '{query}' matched {result.count} articles")
        return result

    async def get_article(self, article_id: int) -> Article:
        """Get a specific Help Center article by ID."""
        data = await self._request(f"/help_center/articles/{article_id}.json")
        return Article.model_validate(data["article"])

    async def get_ticket_comments(self, ticket_id: int) -> list[Comment]:
        """
        Get the comments on a ticket.

        Returns:
            Comments in the order Zendesk returns them (oldest first).
        """
        data = await self._request(f"/tickets/{ticket_id}/comments.json")
        return [Comment.model_validate(c) for c in data.get("comments", [])]

    async def search_all(
        self,
        query: str,
        page: int = 1,
        per_page: int = 50,
    ) -> SearchResult[dict[str, Any]]:
        """
        Search across every record type (tickets, users, organizations, articles).

        Results are returned undecoded since their shape depends on
        each record's ``result_type``.
        """
        data = await self._request("/search.json", self._page_params(query, page, per_page))
        return SearchResult[dict[str, Any]].model_validate(data)

    async def get_tickets_by_tag(
        self,
        tag: str,
        page: int = 1,
        per_page: int = 50,
    ) -> SearchResult[Ticket]:
        """Get tickets carrying a specific tag."""
        return await self.search_tickets(f"tags:{tag}", page, per_page)

    async def get_recent_tickets(
        self,
        page: int = 1,
        per_page: int = 50,
        today: Optional[date] = None,
    ) -> SearchResult[Ticket]:
        """Get tickets created in the last 30 days."""
        return await self.search_tickets(
            f"created>{date_threshold(30, today)}",
            page,
            per_page,
        )
