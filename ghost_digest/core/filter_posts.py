"""
Post selection module.

This module decides which posts belong in a digest.

Components:
- resolve_anchor_date: Turn the configured period into the window's anchor date
- compute_window: Build the daily or weekly DigestWindow around the anchor
- filter_posts_by_window: Keep posts published on a local day inside the window
- filter_posts_by_excluded_tags: Drop posts carrying an excluded tag
- sort_posts_chronologically: Stable oldest-first ordering
- select_digest_posts: All of the above, in order
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from .config import DigestConfig
from .errors import ConfigurationError
from .types import DigestWindow, PeriodKind, Post

logger = logging.getLogger(__name__)

PERIODS = ("daily", "weekly")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WINDOW_DAYS = {"daily": 1, "weekly": 7}


def is_period(period: str) -> bool:
    """Return True for the 'daily' and 'weekly' tokens (case-insensitive)."""
    return period.lower() in PERIODS


def period_kind(period: str) -> PeriodKind:
    """Map the configured period to a window kind. Explicit dates are daily."""
    return "weekly" if period.lower() == "weekly" else "daily"


def resolve_anchor_date(
    period: str, timezone: str, now: Optional[datetime] = None
) -> date:
    """Resolve the date the digest window is anchored on.

    Args:
        period: 'daily', 'weekly' or an explicit YYYY-MM-DD date.
        timezone: IANA zone used to determine "today".
        now: Current instant, mainly for tests. Defaults to the system clock.

    Returns:
        The anchor date.

    Raises:
        ConfigurationError: If the period is neither a known token nor a valid date.
    """
    zone = ZoneInfo(timezone)
    if is_period(period):
        current = now.astimezone(zone) if now else datetime.now(zone)
        return current.date()

    if not DATE_PATTERN.match(period):
        raise ConfigurationError(f"Invalid date format: {period}")
    try:
        return datetime.strptime(period, "%Y-%m-%d").date()
    except ValueError as e:
        raise ConfigurationError(f"Invalid date format: {period}") from e


def compute_window(anchor: date, period: str, timezone: str) -> DigestWindow:
    """Build the half-open window covered by the digest.

    A daily window is the anchor day. A weekly window is the seven days
    ending on the anchor day, inclusive.
    """
    kind = period_kind(period)
    zone = ZoneInfo(timezone)
    days = WINDOW_DAYS[kind]

    start_date = anchor - timedelta(days=days - 1)
    end_date = start_date + timedelta(days=days)
    window = DigestWindow(
        period=kind,
        anchor=anchor,
        start=datetime.combine(start_date, time.min, tzinfo=zone),
        end=datetime.combine(end_date, time.min, tzinfo=zone),
    )
    logger.debug(
        "Date range: %s to %s", window.start.isoformat(), window.end.isoformat()
    )
    return window


def published_instant(post: Post) -> Optional[datetime]:
    """Return the publish timestamp as an aware datetime. Naive values are UTC."""
    if post.published_at is None:
        return None
    if post.published_at.tzinfo is None:
        return post.published_at.replace(tzinfo=dt_timezone.utc)
    return post.published_at


def local_publish_date(post: Post, timezone: str) -> Optional[date]:
    """Return the calendar day a post was published on in ``timezone``."""
    published_at = published_instant(post)
    if published_at is None:
        return None
    return published_at.astimezone(ZoneInfo(timezone)).date()


def filter_posts_by_window(
    posts: Iterable[Post], window: DigestWindow, timezone: str
) -> list[Post]:
    """Keep posts whose local publish day falls inside the window."""
    filtered_posts = []
    for post in posts:
        published_on = local_publish_date(post, timezone)
        if published_on is not None and window.contains(published_on):
            filtered_posts.append(post)
        else:
            logger.debug("Post '%s' is outside the digest window", post.title)
    return filtered_posts


def filter_posts_by_excluded_tags(
    posts: Iterable[Post], excluded_tags: Iterable[str]
) -> list[Post]:
    """Drop posts that carry at least one excluded tag.

    Posts without tags are never excluded.
    """
    excluded = set(excluded_tags)
    filtered_posts = []
    for post in posts:
        if post.tags is not None and excluded.intersection(post.tag_names):
            logger.debug("Post '%s' has an excluded tag, skipping", post.title)
            continue
        filtered_posts.append(post)
    return filtered_posts


def sort_posts_chronologically(posts: Iterable[Post]) -> list[Post]:
    """Sort posts oldest first. Posts with equal timestamps keep their order."""
    return sorted(posts, key=published_instant)


def select_digest_posts(
    posts: list[Post], window: DigestWindow, config: DigestConfig
) -> list[Post]:
    """Apply the window and tag filters and order the result for rendering.

    Args:
        posts: Posts as fetched from Ghost.
        window: The digest window.
        config: Run configuration (timezone and excluded tags).

    Returns:
        Posts to include in the digest, oldest first. May be empty.
    """
    for post in posts:
        logger.debug("Post %s with tags %s", post.title, ",".join(post.tag_names))

    in_window = filter_posts_by_window(posts, window, config.timezone)
    selected = filter_posts_by_excluded_tags(in_window, config.excluded_tags)
    selected = sort_posts_chronologically(selected)

    logger.info("Filtered %d posts for the %s digest", len(selected), window.period)
    return selected
