"""
Payload formatters for the Zendesk MCP Server.

Trim Zendesk records down to the fields an assistant needs, so tool
responses stay compact.
"""

from typing import Any

from .classifier import FeedbackBuckets
from .models import Article, Comment, SearchResult, Ticket


def ticket_summary(ticket: Ticket) -> dict[str, Any]:
    """Ticket fields returned by ticket searches."""
    return {
        "id": ticket.id,
        "subject": ticket.subject,
        "description": ticket.description,
        "status": ticket.status,
        "priority": ticket.priority,
        "created_at": ticket.created_at,
        "updated_at": ticket.updated_at,
        "tags": ticket.tags,
        "channel": ticket.channel,
    }


def ticket_detail(ticket: Ticket) -> dict[str, Any]:
    """Full ticket fields, including custom fields."""
    return {
        "id": ticket.id,
        "subject": ticket.subject,
        "description": ticket.description,
        "status": ticket.status,
        "priority": ticket.priority,
        "created_at": ticket.created_at,
        "updated_at": ticket.updated_at,
        "tags": ticket.tags,
        "custom_fields": (
            [cf.model_dump() for cf in ticket.custom_fields]
            if ticket.custom_fields is not None
            else None
        ),
    }


def ticket_brief(ticket: Ticket, include_priority: bool = True) -> dict[str, Any]:
    """Short ticket listing used by tag and feedback results."""
    brief: dict[str, Any] = {
        "id": ticket.id,
        "subject": ticket.subject,
        "status": ticket.status,
    }
    if include_priority:
        brief["priority"] = ticket.priority
    brief["created_at"] = ticket.created_at
    brief["tags"] = ticket.tags
    return brief


def comment_summary(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "body": comment.body,
        "author_id": comment.author_id,
        "created_at": comment.created_at,
        "public": comment.public,
    }


def article_summary(article: Article) -> dict[str, Any]:
    """Article fields returned by article searches."""
    return {
        "id": article.id,
        "title": article.title,
        "body": article.body,
        "url": article.html_url,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
        "labels": article.label_names,
    }


def article_detail(article: Article) -> dict[str, Any]:
    return {
        "id": article.id,
        "title": article.title,
        "body": article.body,
        "url": article.html_url,
        "author_id": article.author_id,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
        "labels": article.label_names,
    }


def article_link(article: Article) -> dict[str, Any]:
    return {
        "id": article.id,
        "title": article.title,
        "url": article.html_url,
        "labels": article.label_names,
    }


def page_metadata(result: SearchResult, page: int, per_page: int) -> dict[str, Any]:
    """Pagination block shared by all search payloads."""
    return {
        "total_count": result.count,
        "page": page,
        "per_page": per_page,
        "has_more": result.has_more,
    }


def format_ticket_search(
    result: SearchResult[Ticket],
    page: int,
    per_page: int,
) -> dict[str, Any]:
    """
    Format one page of ticket search results.

    At most ``per_page`` tickets are included.
    """
    return {
        **page_metadata(result, page, per_page),
        "tickets": [ticket_summary(t) for t in result.results[:per_page]],
    }


def format_ticket_with_comments(
    ticket: Ticket,
    comments: list[Comment],
) -> dict[str, Any]:
    return {
        "ticket": ticket_detail(ticket),
        "comments": [comment_summary(c) for c in comments],
    }


def format_article_search(
    result: SearchResult[Article],
    page: int,
    per_page: int,
) -> dict[str, Any]:
    """Format one page of article search results."""
    return {
        **page_metadata(result, page, per_page),
        "articles": [article_summary(a) for a in result.results[:per_page]],
    }


def format_tag_search(
    tag: str,
    result: SearchResult[Ticket],
    page: int,
    per_page: int,
) -> dict[str, Any]:
    return {
        "tag": tag,
        **page_metadata(result, page, per_page),
        "tickets": [ticket_brief(t) for t in result.results[:per_page]],
    }


def format_feature_feedback(
    feature_name: str,
    days_back: int,
    tickets: SearchResult[Ticket],
    articles: SearchResult[Article],
    buckets: FeedbackBuckets,
) -> dict[str, Any]:
    """
    Format the feature feedback report.

    The summary reports total match counts from Zendesk alongside the
    size of each bucket built from the returned page.
    """
    return {
        "feature": feature_name,
        "search_period_days": days_back,
        "summary": {
            "total_tickets": tickets.count,
            "bug_reports": len(buckets.bug_reports),
            "feature_requests": len(buckets.feature_requests),
            "support_questions": len(buckets.support_questions),
            "related_articles": articles.count,
        },
        "bug_reports": [ticket_brief(t) for t in buckets.bug_reports],
        "feature_requests": [ticket_brief(t) for t in buckets.feature_requests],
        "support_questions": [
            ticket_brief(t, include_priority=False)
            for t in buckets.support_questions
        ],
        "related_articles": [article_link(a) for a in articles.results],
    }
