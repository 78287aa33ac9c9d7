"""Pagination helpers."""

import math

from pydantic import BaseModel

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


class PageInfo(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    def to_response(self) -> dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def paginate(page: int | None, limit: int | None, max_limit: int = MAX_PAGE_SIZE) -> tuple[int, int, int]:
    """Clamp page/limit; return (page, limit, skip)."""
    page = max(1, 1 if page is None else page)
    limit = max(1, min(DEFAULT_PAGE_SIZE if limit is None else limit, max_limit))
    return page, limit, (page - 1) * limit


def page_info(total: int, page: int, limit: int) -> PageInfo:
    return PageInfo(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))
