from __future__ import annotations

import pytest

from blog.errors import InvalidPaginationError
from blog.pagination import build_pagination, validate_page_params


@pytest.mark.parametrize(
    "page, page_size, total, expected_pages, has_previous, has_next",
    [
        (1, 10, 0, 0, False, False),
        (1, 10, 10, 1, False, False),
        (1, 10, 11, 2, False, True),
        (2, 10, 25, 3, True, True),
        (3, 10, 25, 3, True, False),
        (4, 10, 25, 3, True, False),
    ],
)
def test_build_pagination(page, page_size, total, expected_pages, has_previous, has_next):
    meta = build_pagination(page, page_size, total)
    assert meta.current_page == page
    assert meta.page_size == page_size
    assert meta.total_items == total
    assert meta.total_pages == expected_pages
    assert meta.has_previous is has_previous
    assert meta.has_next is has_next


@pytest.mark.parametrize("page, page_size", [(1, 1), (1, 100), (50, 10)])
def test_validate_page_params_accepts_bounds(page, page_size):
    validate_page_params(page, page_size)


@pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (1, 101)])
def test_validate_page_params_rejects_out_of_range(page, page_size):
    with pytest.raises(InvalidPaginationError) as exc_info:
        validate_page_params(page, page_size)
    assert exc_info.value.status_code == 400


def test_pagination_serializes_camel_case():
    data = build_pagination(1, 10, 5).model_dump(by_alias=True)
    assert set(data) == {
        "currentPage",
        "pageSize",
        "totalPages",
        "totalItems",
        "hasPrevious",
        "hasNext",
    }
