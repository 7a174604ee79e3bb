"""
Digest rendering module.

Turns the selected posts into a Markdown digest, converts it to HTML and
formats the window label used in the digest title.
"""

import logging
from datetime import timedelta
from typing import Iterable

from markdown_it import MarkdownIt

from .types import DigestWindow, Post

logger = logging.getLogger(__name__)

# CommonMark with raw HTML passthrough, so full article bodies survive conversion
_md = MarkdownIt("commonmark", {"html": True})


def render_post_block(post: Post, full_article: bool) -> str:
    """Render the Markdown block for a single post."""
    published_on = post.published_at.strftime("%Y-%m-%d") if post.published_at else ""

    block = f"## {post.title}\n"
    block += f"**Date:** {published_on}\n\n"

    if post.feature_image:
        block += f"![Image]({post.feature_image})\n\n"

    if full_article:
        block += f"{post.html or ''}\n\n"
        block += f"[View article]({post.url})\n\n"
    else:
        block += f"{post.excerpt or ''}...\n\n"
        block += f"[Read more]({post.url})\n\n"

    return block


def generate_markdown_digest(posts: Iterable[Post], full_article: bool) -> str:
    """Render the digest as Markdown, one block per post in the given order.

    Args:
        posts: Posts already filtered and sorted for the digest.
        full_article: Render the full body instead of the excerpt.

    Returns:
        The Markdown digest; an empty string when there are no posts.
    """
    blocks = []
    for post in posts:
        logger.debug(
            "Processing post: %s with tags %s", post.title, ",".join(post.tag_names)
        )
        blocks.append(render_post_block(post, full_article))
    return "".join(blocks)


def convert_markdown_to_html(markdown: str) -> str:
    """Convert the Markdown digest to HTML."""
    if not markdown:
        return ""
    return _md.render(markdown)


def format_window_label(window: DigestWindow) -> str:
    """Human readable label for the window: 'M/D' or 'M/D - M/D'."""
    start = window.start_date
    if window.period == "weekly":
        last_day = window.end_date - timedelta(days=1)
        return f"{start.month}/{start.day} - {last_day.month}/{last_day.day}"
    return f"{start.month}/{start.day}"
