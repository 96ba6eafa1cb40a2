"""Shared API schemas (pagination envelope)."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from app.application.dtos.common import Page

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """One page of items plus paging totals."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Any], convert: Callable[[Any], T]) -> "PageResponse[T]":
        return cls(
            items=[convert(item) for item in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class BulkResultResponse(BaseModel):
    created: int
    skipped: int
