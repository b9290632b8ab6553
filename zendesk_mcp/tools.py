"""
Tool catalog and dispatcher for the Zendesk MCP Server.

Declares the fixed set of tools offered to the assistant, each with a
JSON schema for its arguments and an async handler that calls the
Zendesk client and reshapes the result.

Every call returns a ToolResult. Failures (HTTP errors, bad arguments,
unknown tool names) are reported in-band as error-flagged text so the
assistant always receives something readable.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel

from .classifier import classify_feedback
from .formatters import (
    article_detail,
    format_article_search,
    format_feature_feedback,
    format_tag_search,
    format_ticket_search,
    format_ticket_with_comments,
)
from .models import (
    TICKET_PRIORITIES,
    TICKET_STATUSES,
    Comment,
    FeatureFeedbackArgs,
    GetArticleArgs,
    GetTicketArgs,
    SearchArticlesArgs,
    SearchTicketsArgs,
    TicketsByTagArgs,
)
from .zendesk_client import ZendeskClient, date_threshold


logger = logging.getLogger(__name__)

FEEDBACK_TICKET_LIMIT = 100
FEEDBACK_ARTICLE_LIMIT = 50


class UnknownToolError(Exception):
    """The requested tool is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


Handler = Callable[[ZendeskClient, Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """A tool in the catalog."""

    name: str
    description: str
    input_schema: dict[str, Any]
    args_model: type[BaseModel]
    handler: Handler

    def to_dict(self) -> dict[str, Any]:
        """Serialize the public fields, omitting the handler."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class ToolResult:
    """Envelope returned for every tool call."""

    text: str
    is_error: bool = False

    @classmethod
    def success(cls, payload: dict[str, Any]) -> "ToolResult":
        return cls(text=json.dumps(payload, indent=2, default=str))

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(text=f"Error: {message}", is_error=True)


# =============================================================================
# Handlers
# =============================================================================

async def _search_tickets(client: ZendeskClient, args: SearchTicketsArgs) -> dict[str, Any]:
    results = await client.search_tickets(args.query, args.page, args.per_page)
    return format_ticket_search(results, args.page, args.per_page)


async def _get_ticket(client: ZendeskClient, args: GetTicketArgs) -> dict[str, Any]:
    ticket = await client.get_ticket(args.ticket_id)
    comments: list[Comment] = []
    if args.include_comments:
        comments = await client.get_ticket_comments(args.ticket_id)
    return format_ticket_with_comments(ticket, comments)


async def _search_articles(client: ZendeskClient, args: SearchArticlesArgs) -> dict[str, Any]:
    results = await client.search_articles(args.query, args.page, args.per_page)
    return format_article_search(results, args.page, args.per_page)


async def _get_article(client: ZendeskClient, args: GetArticleArgs) -> dict[str, Any]:
    article = await client.get_article(args.article_id)
    return article_detail(article)


def build_feedback_query(
    feature_name: str,
    days_back: int,
    include_solved: bool,
    today: Optional[date] = None,
) -> str:
    """
    Build the ticket query for a feature feedback search.

    Args:
        feature_name: Feature to search for.
        days_back: Only tickets created after today minus this many days.
        include_solved: If False, restrict to tickets not yet solved.
        today: Override for the current UTC date.

    Returns:
        Zendesk search query string.
    """
    query = f"{feature_name} created>{date_threshold(days_back, today)}"
    if not include_solved:
        query += " status<solved"
    return query


async def _search_feature_feedback(
    client: ZendeskClient,
    args: FeatureFeedbackArgs,
) -> dict[str, Any]:
    query = build_feedback_query(args.feature_name, args.days_back, args.include_solved)

    # Both searches must succeed; the first failure fails the call
    tickets, articles = await asyncio.gather(
        client.search_tickets(query, 1, FEEDBACK_TICKET_LIMIT),
        client.search_articles(args.feature_name, 1, FEEDBACK_ARTICLE_LIMIT),
    )

    buckets = classify_feedback(tickets.results)
    return format_feature_feedback(
        args.feature_name,
        args.days_back,
        tickets,
        articles,
        buckets,
    )


async def _get_tickets_by_tag(client: ZendeskClient, args: TicketsByTagArgs) -> dict[str, Any]:
    results = await client.get_tickets_by_tag(args.tag, args.page, args.per_page)
    return format_tag_search(args.tag, results, args.page, args.per_page)


# =============================================================================
# Catalog
# =============================================================================

def _page_properties(per_page_description: str) -> dict[str, Any]:
    return {
        "page": {
            "type": "integer",
            "description": "Page number (default: 1)",
            "default": 1,
            "minimum": 1,
        },
        "per_page": {
            "type": "integer",
            "description": per_page_description,
            "default": 50,
            "minimum": 1,
            "maximum": 100,
        },
    }


TOOLS: list[ToolSpec] = [
    ToolSpec(
        name="search_tickets",
        description=f"""Search Zendesk support tickets with advanced query syntax.

Examples:
- "status:open tags:collections" - Find open tickets tagged with "collections"
- "subject:bug priority:high" - Find high priority bug tickets
- "tags:feature_request created>2024-01-01" - Find feature requests created after Jan 1, 2024
- "collections route" - Full-text search for "collections route"

Query syntax supports:
- status: ({', '.join(TICKET_STATUSES)})
- priority: ({', '.join(TICKET_PRIORITIES)})
- tags: (tag names)
- created: (date comparisons like >2024-01-01, <2024-12-31)
- subject: (search in subject)
- Full text search without prefix""",
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query using Zendesk query syntax",
                },
                **_page_properties("Results per page (default: 50, max: 100)"),
            },
            "required": ["query"],
        },
        args_model=SearchTicketsArgs,
        handler=_search_tickets,
    ),
    ToolSpec(
        name="get_ticket",
        description="Get full details of a specific ticket by ID, including all comments and metadata",
        input_schema={
            "type": "object",
            "properties": {
                "ticket_id": {
                    "type": "integer",
                    "description": "The Zendesk ticket ID",
                },
                "include_comments": {
                    "type": "boolean",
                    "description": "Whether to include all ticket comments (default: true)",
                    "default": True,
                },
            },
            "required": ["ticket_id"],
        },
        args_model=GetTicketArgs,
        handler=_get_ticket,
    ),
    ToolSpec(
        name="search_articles",
        description="""Search Zendesk Help Center articles (knowledge base).

Examples:
- "collections feature" - Search for articles about collections
- "route planning guide" - Find articles about route planning
- "label:feature_name" - Search by label""",
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query",
                },
                **_page_properties("Results per page (default: 50, max: 100)"),
            },
            "required": ["query"],
        },
        args_model=SearchArticlesArgs,
        handler=_search_articles,
    ),
    ToolSpec(
        name="get_article",
        description="Get full content of a specific Help Center article by ID",
        input_schema={
            "type": "object",
            "properties": {
                "article_id": {
                    "type": "integer",
                    "description": "The article ID",
                },
            },
            "required": ["article_id"],
        },
        args_model=GetArticleArgs,
        handler=_get_article,
    ),
    ToolSpec(
        name="search_feature_feedback",
        description="""Search for all tickets and articles related to a specific feature.
This is a convenience tool that searches for feature-related content including:
- Bug reports
- Feature requests
- User feedback
- Support questions

Example: "collections" will find all tickets and articles mentioning collections""",
        input_schema={
            "type": "object",
            "properties": {
                "feature_name": {
                    "type": "string",
                    "description": 'Name of the feature to search for (e.g., "collections", "route planning")',
                },
                "include_solved": {
                    "type": "boolean",
                    "description": "Include solved/closed tickets (default: true)",
                    "default": True,
                },
                "days_back": {
                    "type": "integer",
                    "description": "Number of days to look back (default: 90)",
                    "default": 90,
                    "minimum": 0,
                },
            },
            "required": ["feature_name"],
        },
        args_model=FeatureFeedbackArgs,
        handler=_search_feature_feedback,
    ),
    ToolSpec(
        name="get_tickets_by_tag",
        description="Get all tickets with a specific tag",
        input_schema={
            "type": "object",
            "properties": {
                "tag": {
                    "type": "string",
                    "description": "Tag name to search for",
                },
                **_page_properties("Results per page (default: 50)"),
            },
            "required": ["tag"],
        },
        args_model=TicketsByTagArgs,
        handler=_get_tickets_by_tag,
    ),
]

TOOLS_BY_NAME: dict[str, ToolSpec] = {tool.name: tool for tool in TOOLS}


class ToolDispatcher:
    """
    Executes catalog tools against a Zendesk client.

    Holds no state between calls beyond the client itself.
    """

    def __init__(self, client: ZendeskClient):
        """
        Initialize the dispatcher.

        Args:
            client: An open ZendeskClient.
        """
        self._client = client

    def list_tools(self) -> list[ToolSpec]:
        """Get the static tool catalog."""
        return list(TOOLS)

    async def call(self, name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """
        Run a tool by name.

        Args:
            name: Tool name from the catalog.
            arguments: Tool arguments as sent by the client.

        Returns:
            ToolResult with pretty-printed JSON, or an error-flagged
            message if anything went wrong.
        """
        logger.info(f"Tool call: {name} arguments={arguments}")

        try:
            tool = TOOLS_BY_NAME.get(name)
            if tool is None:
                raise UnknownToolError(name)

            args = tool.args_model.model_validate(arguments or {})
            payload = await tool.handler(self._client, args)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            return ToolResult.error(str(e))

        return ToolResult.success(payload)
