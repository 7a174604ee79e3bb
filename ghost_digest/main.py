"""
Ghost Digest DAG.

This DAG builds a digest of recently published Ghost posts:
1. Resolves the digest window (daily, weekly or an explicit date)
2. Fetches the latest posts from the Ghost Admin API
3. Filters them by window and excluded tags and renders the digest
4. Creates the digest as a draft post and returns its slug

Inputs are read from Airflow Variables using the same names as the
environment variables understood by ``ghost_digest.run_digest``.
The DAG is scheduled to run daily at 8:00 AM UTC.
"""

import logging
from datetime import datetime
from typing import Any

from airflow.decorators import dag, task
from airflow.sdk import Variable

from ghost_digest.core.config import (
    API_KEY_KEY,
    DEBUG_KEY,
    EXCLUDED_TAGS_KEY,
    FULL_ARTICLE_KEY,
    PERIOD_KEY,
    TAGS_KEY,
    TIMEZONE_KEY,
    TITLE_KEY,
    URL_KEY,
    DigestConfig,
    load_digest_config,
)
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
from ghost_digest.core.types import DigestWindow, Post
from ghost_digest.run_digest import RESULT_PREFIX

logger = logging.getLogger(__name__)

INPUT_KEYS = (
    URL_KEY,
    API_KEY_KEY,
    PERIOD_KEY,
    DEBUG_KEY,
    TAGS_KEY,
    EXCLUDED_TAGS_KEY,
    TIMEZONE_KEY,
    TITLE_KEY,
    FULL_ARTICLE_KEY,
)

default_args = {
    "owner": "airflow",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    # Failures are terminal for the run
    "retries": 0,
}


def load_config_from_variables() -> DigestConfig:
    """Read the digest inputs from Airflow Variables."""
    inputs = {key: Variable.get(key=key, default=None) or "" for key in INPUT_KEYS}
    config = load_digest_config(inputs)
    # Task logs go through Airflow's handlers; only the package level is ours
    logging.getLogger("ghost_digest").setLevel(
        logging.DEBUG if config.debug else logging.INFO
    )
    return config


@dag(
    dag_id="ghost_digest_pipeline",
    default_args=default_args,
    description="Create a draft digest post from recently published Ghost posts.",
    start_date=datetime(2024, 1, 1),
    tags=["ghost", "digest", "newsletter"],
    catchup=False,
    schedule="0 8 * * *",
)
def ghost_digest_pipeline() -> None:
    """Define the Ghost digest DAG."""

    @task
    def resolve_window_task() -> dict[str, Any]:
        """Resolve the digest window.

        Returns:
            The window, serialized for XCom.
        """
        config = load_config_from_variables()
        anchor = resolve_anchor_date(config.period, config.timezone)
        window = compute_window(anchor, config.period, config.timezone)
        logger.info("Digest window: %s to %s", window.start, window.end)
        return window.model_dump(mode="json")

    @task
    def fetch_posts_task() -> list[dict[str, Any]]:
        """Fetch the latest posts from Ghost."""
        config = load_config_from_variables()
        client = GhostAdminClient(config.url, config.api_key)
        posts = fetch_recent_posts(client)
        return [post.model_dump(mode="json") for post in posts]

    @task
    def build_digest_task(
        window_data: dict[str, Any], post_data: list[dict[str, Any]]
    ) -> str:
        """Filter the posts and render the HTML digest."""
        config = load_config_from_variables()
        window = DigestWindow.model_validate(window_data)
        posts = [Post.model_validate(item) for item in post_data]

        selected_posts = select_digest_posts(posts, window, config)
        markdown_digest = generate_markdown_digest(selected_posts, config.full_article)
        return convert_markdown_to_html(markdown_digest)

    @task
    def publish_digest_task(window_data: dict[str, Any], html_digest: str) -> str:
        """Create the digest draft.

        Returns:
            The run result, naming the created slug.
        """
        config = load_config_from_variables()
        window = DigestWindow.model_validate(window_data)
        client = GhostAdminClient(config.url, config.api_key)
        slug = publish_digest(client, config, window, html_digest)
        return f"{RESULT_PREFIX}{slug}"

    # DAG workflow definition
    window = resolve_window_task()
    posts = fetch_posts_task()
    window >> posts

    html_digest = build_digest_task(window, posts)
    publish_digest_task(window, html_digest)


# Instantiate the DAG
ghost_digest_pipeline()
