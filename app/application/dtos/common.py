"""Shared DTOs (pagination)."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the total count for the filter."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


def clamp_page(page: int | None, page_size: int | None, default: int = 20, maximum: int = 100) -> tuple[int, int]:
    """Normalize page (>= 1) and page size (1..maximum, default when unset)."""
    p = page if page and page > 0 else 1
    size = page_size if page_size and page_size > 0 else default
    return p, min(size, maximum)
