"""
Data models for the Zendesk MCP Server.

Uses Pydantic for validation of Zendesk payloads and tool arguments.
Zendesk records are read-only projections of remote state, so they are
frozen. Fields Zendesk sends that are not modelled here are ignored.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")

TICKET_STATUSES = ("new", "open", "pending", "hold", "solved", "closed")
TICKET_PRIORITIES = ("low", "normal", "high", "urgent")


class Via(BaseModel):
    """Inbound channel a ticket was created through."""

    channel: Optional[str] = None

    model_config = {"frozen": True}


class CustomField(BaseModel):
    """A custom ticket field value."""

    id: int
    value: Any = None

    model_config = {"frozen": True}


class Ticket(BaseModel):
    """
    A Zendesk support ticket.

    Attributes:
        id: Ticket number
        subject: Ticket subject line
        description: First comment of the ticket
        status: One of new, open, pending, hold, solved, closed
        priority: One of low, normal, high, urgent (may be unset)
        tags: Tags applied to the ticket
        custom_fields: Custom field values, when the account defines any
        via: Channel the ticket came in through
    """

    id: int = Field(..., description="Ticket ID")
    subject: Optional[str] = Field(default="", description="Subject line")
    description: Optional[str] = Field(default="", description="Initial description")
    status: Optional[str] = Field(default=None, description="Ticket status")
    priority: Optional[str] = Field(default=None, description="Ticket priority")
    created_at: Optional[str] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[str] = Field(default=None, description="Last update timestamp")
    tags: list[str] = Field(default_factory=list, description="Ticket tags")
    custom_fields: Optional[list[CustomField]] = Field(
        default=None,
        description="Custom field values"
    )
    via: Optional[Via] = Field(default=None, description="Inbound channel")

    model_config = {"frozen": True}

    @property
    def channel(self) -> Optional[str]:
        """Get the inbound channel name, if known."""
        return self.via.channel if self.via else None


class Article(BaseModel):
    """A Help Center knowledge base article."""

    id: int = Field(..., description="Article ID")
    title: str = Field(default="", description="Article title")
    body: Optional[str] = Field(default="", description="Article HTML body")
    author_id: Optional[int] = Field(default=None, description="Author user ID")
    created_at: Optional[str] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[str] = Field(default=None, description="Last update timestamp")
    html_url: Optional[str] = Field(default=None, description="Public article URL")
    section_id: Optional[int] = Field(default=None, description="Containing section")
    label_names: Optional[list[str]] = Field(default=None, description="Article labels")

    model_config = {"frozen": True}


class Comment(BaseModel):
    """A comment on a ticket, public or internal."""

    id: int
    body: str = ""
    author_id: Optional[int] = None
    created_at: Optional[str] = None
    public: bool = True

    model_config = {"frozen": True}


class SearchResult(BaseModel, Generic[T]):
    """One page of search results plus pagination metadata."""

    results: list[T] = Field(default_factory=list)
    count: int = 0
    next_page: Optional[str] = None
    previous_page: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def has_more(self) -> bool:
        """Check if another page follows this one."""
        return bool(self.next_page)


# =============================================================================
# Tool arguments
# =============================================================================

class PageArgs(BaseModel):
    """Pagination arguments shared by the search tools."""

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=50, ge=1, le=100)


class SearchTicketsArgs(PageArgs):
    query: str


class GetTicketArgs(BaseModel):
    ticket_id: int
    include_comments: bool = True


class SearchArticlesArgs(PageArgs):
    query: str


class GetArticleArgs(BaseModel):
    article_id: int


class FeatureFeedbackArgs(BaseModel):
    feature_name: str = Field(..., min_length=1)
    include_solved: bool = True
    days_back: int = Field(default=90, ge=0)


class TicketsByTagArgs(PageArgs):
    tag: str = Field(..., min_length=1)
