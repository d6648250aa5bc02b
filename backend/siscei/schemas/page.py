"""Generic paged response envelope."""
from __future__ import annotations

from typing import Callable, Generic, TypeVar

from pydantic import BaseModel

from siscei.repositories.base import Page

ItemT = TypeVar("ItemT")


class PageRead(BaseModel, Generic[ItemT]):
    content: list[ItemT]
    total_elements: int
    total_pages: int
    page: int
    size: int

    @classmethod
    def from_page(cls, page: Page, convert: Callable[[object], ItemT]) -> "PageRead[ItemT]":
        return cls(
            content=[convert(item) for item in page.content],
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            page=page.page,
            size=page.size,
        )
