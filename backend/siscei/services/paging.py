"""Helpers shared by the list operations of every service."""
from __future__ import annotations

from siscei.core.config import get_settings
from siscei.repositories.base import PageRequest


def parse_filters(filters: str | None) -> list[str]:
    """Split a comma-separated filter string into trimmed, non-blank tokens.

    >>> parse_filters(" 1000, ,xó ")
    ['1000', 'xó']
    """
    if not filters:
        return []
    return [token.strip() for token in filters.split(",") if token.strip()]


def resolve_page(page: PageRequest | None) -> PageRequest:
    """Fill in the default window and cap the page size."""
    settings = get_settings()
    if page is None:
        return PageRequest(page=0, size=settings.default_page_size)
    if page.size > settings.max_page_size:
        return PageRequest(page=page.page, size=settings.max_page_size)
    return page
