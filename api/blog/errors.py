"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status it maps to; the application-level
handler in main.py turns them into problem documents.
"""

from __future__ import annotations

from fastapi import status


class BlogError(Exception):
    """Base exception for all blog service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    title: str = "Internal Server Error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.title)
        self.detail = detail


class InvalidPaginationError(BlogError):
    """Raised when page or page size is out of range."""

    status_code = status.HTTP_400_BAD_REQUEST
    title = "Bad Request"


class PostNotFoundError(BlogError):
    """Raised when a post id or slug does not resolve to a live post."""

    status_code = status.HTTP_404_NOT_FOUND
    title = "Not Found"


class PostPermissionError(BlogError):
    """Raised when someone other than the owner tries to change a post."""

    status_code = status.HTTP_403_FORBIDDEN
    title = "Forbidden"
