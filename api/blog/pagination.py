from __future__ import annotations

import math

from sqlalchemy.orm import Query

from . import schemas
from .errors import InvalidPaginationError
from .settings import MAX_PAGE_SIZE


def validate_page_params(page: int, page_size: int) -> None:
    """
    Reject out-of-range paging before any query runs.

    Raises:
        InvalidPaginationError: if page < 1 or page_size is outside [1, MAX_PAGE_SIZE]
    """
    if page < 1:
        raise InvalidPaginationError("page must be 1 or greater")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise InvalidPaginationError(f"pageSize must be between 1 and {MAX_PAGE_SIZE}")


def apply_offset(query: Query, page: int, page_size: int) -> Query:
    """Apply OFFSET (page-1)*page_size and LIMIT page_size to an ordered query."""
    return query.offset((page - 1) * page_size).limit(page_size)


def build_pagination(page: int, page_size: int, total_items: int) -> schemas.PaginationMetadata:
    """
    Compute page metadata for a filtered result set.

    Args:
        page: 1-based page number
        page_size: Requested page size
        total_items: Row count of the filtered set before paging
    """
    total_pages = math.ceil(total_items / page_size)
    return schemas.PaginationMetadata(
        current_page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_items=total_items,
        has_previous=page > 1,
        has_next=page < total_pages,
    )
