"""
Post view counting.

Post views are counted after the response has been sent. Counting must never
fail or slow down the read that triggered it.
"""

from __future__ import annotations

import logging

from ..services import post_mutation

logger = logging.getLogger(__name__)


def record_post_view(post_id: int) -> None:
    """
    Increment a post's view counter in a separate database session.

    Meant to be scheduled as a background task. Any error is logged and
    dropped.
    """
    # Separate session: the increment commits independently of the request
    from ..db import SessionLocal

    view_db = SessionLocal()
    try:
        post_mutation.increment_view_count(view_db, post_id)
        logger.debug(f"Recorded view for post {post_id}")
    except Exception as e:
        view_db.rollback()
        logger.warning(f"Failed to record view for post {post_id}: {e}", exc_info=True)
    finally:
        view_db.close()
