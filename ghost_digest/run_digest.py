"""
Standalone runner for the Ghost digest pipeline.

Reads its inputs from the environment (optionally from a .env file), runs
the whole pipeline once and reports the created draft. Exit status is 0 on
success and 1 on any failure, which is what a scheduler needs to see.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Mapping, Optional

from dotenv import load_dotenv

from ghost_digest.core.config import DigestConfig, load_digest_config
from ghost_digest.core.errors import DigestError
from ghost_digest.core.fetch_posts import fetch_recent_posts
from ghost_digest.core.filter_posts import (
    compute_window,
    resolve_anchor_date,
    select_digest_posts,
)
from ghost_digest.core.ghost_client import GhostAdminClient
from ghost_digest.core.publish_digest import publish_digest
from ghost_digest.core.render_digest import (
    convert_markdown_to_html,
    generate_markdown_digest,
)

logger: logging.Logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
RESULT_PREFIX = "Newsletter post created: "


def configure_logging(debug: bool) -> None:
    """Send log records to stdout; DEBUG when the debug flag is set."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def run_pipeline(
    config: DigestConfig,
    client: Optional[GhostAdminClient] = None,
    now: Optional[datetime] = None,
) -> str:
    """Execute the digest pipeline once.

    Args:
        config: Run configuration.
        client: Ghost client to use. Built from the configuration when omitted.
        now: Current instant, for resolving "today". Defaults to the clock.

    Returns:
        The run result, naming the slug of the created draft.

    Raises:
        DigestError: On invalid configuration, or when fetching or publishing fails.
    """
    # Resolve the window before touching the network
    anchor = resolve_anchor_date(config.period, config.timezone, now=now)
    logger.debug(
        "Starting digest generation with startDate: %s and period: %s",
        anchor,
        config.period,
    )
    window = compute_window(anchor, config.period, config.timezone)

    if client is None:
        client = GhostAdminClient(config.url, config.api_key)

    posts = fetch_recent_posts(client)
    selected_posts = select_digest_posts(posts, window, config)

    markdown_digest = generate_markdown_digest(selected_posts, config.full_article)
    html_digest = convert_markdown_to_html(markdown_digest)

    slug = publish_digest(client, config, window, html_digest)
    return f"{RESULT_PREFIX}{slug}"


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """Console entry point. Returns the process exit status."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    try:
        config = load_digest_config(environ)
    except DigestError as e:
        configure_logging(debug=False)
        logger.error("Digest run failed: %s", e)
        return 1

    configure_logging(debug=config.debug)
    start_time = datetime.now()
    logger.info("=== Starting Ghost Digest Pipeline ===")

    try:
        result = run_pipeline(config)
    except DigestError as e:
        logger.error("Digest run failed: %s", e)
        return 1

    print(result)
    logger.info("=== Pipeline completed successfully in %s ===", datetime.now() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
