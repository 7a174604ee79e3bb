"""
Ghost Post Fetcher Module.

This module retrieves the most recently published posts from the Ghost
Admin API and validates them into Post models.
"""

import logging

import requests
from pydantic import ValidationError

from .errors import FetchError, GhostAPIError
from .ghost_client import GhostAdminClient
from .types import Post

logger = logging.getLogger(__name__)

BROWSE_LIMIT = 200
BROWSE_ORDER = "published_at DESC"


def fetch_recent_posts(client: GhostAdminClient) -> list[Post]:
    """Fetch up to 200 published posts, newest first.

    Args:
        client: Authenticated Ghost Admin API client.

    Returns:
        List of validated posts. An empty list means the site returned no posts.

    Raises:
        FetchError: If the request fails, the API rejects it, or a post does
            not have the expected shape.
    """
    try:
        logger.debug("Fetching posts from Ghost API...")
        raw_posts = client.browse_posts(
            limit=BROWSE_LIMIT,
            order=BROWSE_ORDER,
            formats="html",
            include="tags",
            filter="status:published",
        )
        posts = [Post.model_validate(raw_post) for raw_post in raw_posts]
    except (requests.exceptions.RequestException, GhostAPIError, ValidationError) as e:
        logger.error("Failed to fetch posts from Ghost API: %s", e)
        raise FetchError(f"Failed to fetch posts from Ghost API: {e}") from e

    logger.info("Fetched %d posts from Ghost API", len(posts))
    return posts
