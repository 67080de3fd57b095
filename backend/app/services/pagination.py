"""
Blog API — Offset Pagination
==============================

What:  Normalizes page/page_size query values and turns them into an offset.

Clamping rules:
    page       < 1 becomes 1
    page_size  < 1 becomes 1; missing becomes the configured default;
               above the configured maximum becomes the maximum

A page past the end is not an error; it is simply empty.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    @classmethod
    def from_query(
        cls,
        page: Optional[int],
        page_size: Optional[int],
        default_size: int = 10,
        max_size: int = 100,
    ) -> "PageRequest":
        page = max(1, page or 1)
        if page_size is None:
            page_size = default_size
        page_size = min(max(1, page_size), max_size)
        return cls(page=page, page_size=page_size)
