"""
Feature feedback classifier for the Zendesk MCP Server.

Sorts the tickets found for a feature into bug reports, feature requests
and support questions using keyword matches on tags and subject.

Each ticket lands in exactly one bucket. Rules are checked in order and
the first match wins:
1. Bug report: a tag contains "bug", or the subject contains "bug" or "issue"
2. Feature request: a tag contains "feature" or "enhancement", or the
   subject contains "feature request" or "enhancement"
3. Support question: everything else
"""

import logging
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field

from .models import Ticket


logger = logging.getLogger(__name__)


class FeedbackCategory(str, Enum):
    """Bucket a ticket is classified into."""

    BUG_REPORT = "bug_reports"
    FEATURE_REQUEST = "feature_requests"
    SUPPORT_QUESTION = "support_questions"


BUG_TAG_KEYWORDS = ("bug",)
BUG_SUBJECT_KEYWORDS = ("bug", "issue")
FEATURE_TAG_KEYWORDS = ("feature", "enhancement")
FEATURE_SUBJECT_KEYWORDS = ("feature request", "enhancement")


def _tags_contain(ticket: Ticket, keywords: Iterable[str]) -> bool:
    return any(
        keyword in tag.lower()
        for tag in ticket.tags
        for keyword in keywords
    )


def _subject_contains(ticket: Ticket, keywords: Iterable[str]) -> bool:
    subject = (ticket.subject or "").lower()
    return any(keyword in subject for keyword in keywords)


def is_bug_report(ticket: Ticket) -> bool:
    """Check if a ticket looks like a bug report."""
    return (
        _tags_contain(ticket, BUG_TAG_KEYWORDS)
        or _subject_contains(ticket, BUG_SUBJECT_KEYWORDS)
    )


def is_feature_request(ticket: Ticket) -> bool:
    """Check if a ticket looks like a feature request."""
    return (
        _tags_contain(ticket, FEATURE_TAG_KEYWORDS)
        or _subject_contains(ticket, FEATURE_SUBJECT_KEYWORDS)
    )


def classify_ticket(ticket: Ticket) -> FeedbackCategory:
    """
    Classify a single ticket.

    Args:
        ticket: The ticket to classify.

    Returns:
        The first matching category in precedence order.
    """
    if is_bug_report(ticket):
        return FeedbackCategory.BUG_REPORT
    if is_feature_request(ticket):
        return FeedbackCategory.FEATURE_REQUEST
    return FeedbackCategory.SUPPORT_QUESTION


class FeedbackBuckets(BaseModel):
    """Tickets grouped by feedback category, in their original order."""

    bug_reports: list[Ticket] = Field(default_factory=list)
    feature_requests: list[Ticket] = Field(default_factory=list)
    support_questions: list[Ticket] = Field(default_factory=list)

    def bucket(self, category: FeedbackCategory) -> list[Ticket]:
        """Get the ticket list for a category."""
        return getattr(self, category.value)

    @property
    def total(self) -> int:
        """Number of tickets across all buckets."""
        return (
            len(self.bug_reports)
            + len(self.feature_requests)
            + len(self.support_questions)
        )


def classify_feedback(tickets: Iterable[Ticket]) -> FeedbackBuckets:
    """
    Classify tickets into feedback buckets.

    Args:
        tickets: Tickets returned by a feature search.

    Returns:
        FeedbackBuckets holding every ticket exactly once.
    """
    buckets = FeedbackBuckets()
    for ticket in tickets:
        buckets.bucket(classify_ticket(ticket)).append(ticket)

    logger.debug(
        f"Classified {buckets.total} tickets: "
        f"{len(buckets.bug_reports)} bugs, "
        f"{len(buckets.feature_requests)} feature requests, "
        f"{len(buckets.support_questions)} support questions"
    )
    return buckets
