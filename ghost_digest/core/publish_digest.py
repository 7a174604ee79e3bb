"""
Digest Publisher Module.

This module submits the rendered digest to Ghost as a new draft post.
"""

import logging
from typing import Any

import requests

from .config import DigestConfig
from .errors import GhostAPIError, PublishError
from .ghost_client import GhostAdminClient
from .render_digest import format_window_label
from .types import DigestWindow

logger = logging.getLogger(__name__)

DRAFT_STATUS = "draft"
HTML_SOURCE = "html"


def build_digest_post(
    config: DigestConfig, window: DigestWindow, html: str
) -> dict[str, Any]:
    """Build the post payload for the digest draft."""
    return {
        "title": f"{config.title} ({format_window_label(window)})",
        "html": html,
        "tags": [{"name": tag} for tag in config.tags],
        "status": DRAFT_STATUS,
    }


def publish_digest(
    client: GhostAdminClient, config: DigestConfig, window: DigestWindow, html: str
) -> str:
    """Create the digest as a draft post.

    Args:
        client: Authenticated Ghost Admin API client.
        config: Run configuration (title and tags).
        window: The digest window, used for the title label.
        html: Rendered digest body.

    Returns:
        Slug of the created post.

    Raises:
        PublishError: If the request fails or Ghost rejects the post.
    """
    post = build_digest_post(config, window, html)
    logger.debug("Creating newsletter post... %s", post["title"])

    try:
        created = client.add_post(post, source=HTML_SOURCE)
    except (requests.exceptions.RequestException, GhostAPIError) as e:
        logger.error("Failed to create newsletter post: %s", e)
        raise PublishError(f"Failed to create newsletter post: {e}") from e

    slug = created.get("slug")
    if not slug:
        raise PublishError("Failed to create newsletter post: response has no slug")

    logger.info("Newsletter post created: %s", slug)
    return slug
