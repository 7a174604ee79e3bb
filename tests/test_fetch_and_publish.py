# pylint: disable=redefined-outer-name
"""
Unit tests for the fetch_posts and publish_digest modules.

This module tests that posts are fetched and validated, that the digest
draft is built correctly, and that API and transport failures are reported.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from ghost_digest.core.config import DigestConfig
from ghost_digest.core.errors import FetchError, GhostAPIError, PublishError
from ghost_digest.core.fetch_posts import fetch_recent_posts
from ghost_digest.core.filter_posts import compute_window
from ghost_digest.core.ghost_client import GhostAdminClient
from ghost_digest.core.publish_digest import build_digest_post, publish_digest

# --- Fixtures ---


@pytest.fixture
def mock_client() -> MagicMock:
    """Provide a mocked Ghost client."""
    return MagicMock(spec=GhostAdminClient)


@pytest.fixture
def raw_posts() -> list[dict]:
    """Provide posts as returned by the Admin API."""
    return [
        {
            "id": "2",
            "title": "Newer",
            "url": "https://blog.example.com/newer/",
            "published_at": "2024-01-11T18:00:00.000Z",
            "tags": [{"id": "t1", "name": "News", "slug": "news"}],
            "feature_image": None,
            "html": "<p>Newer</p>",
            "excerpt": "Newer excerpt",
            "status": "published",
        },
        {
            "id": "1",
            "title": "Older",
            "url": "https://blog.example.com/older/",
            "published_at": "2024-01-10T18:00:00.000Z",
            "html": "<p>Older</p>",
            "excerpt": "Older excerpt",
        },
    ]


@pytest.fixture
def weekly_config() -> DigestConfig:
    """Provide a weekly configuration with two output tags."""
    return DigestConfig(
        url="https://blog.example.com",
        api_key="id:00",
        period="weekly",
        tags=["Digest", "Newsletter"],
        title="Weekly Digest",
    )


# --- Tests for fetch_recent_posts ---


def test_fetch_recent_posts_success(mock_client: MagicMock, raw_posts: list[dict]) -> None:
    """Test that posts are requested newest first and parsed into Post models."""
    # --- Arrange ---
    mock_client.browse_posts.return_value = raw_posts

    # --- Act ---
    posts = fetch_recent_posts(mock_client)

    # --- Assert ---
    assert [post.title for post in posts] == ["Newer", "Older"]
    assert posts[0].tag_names == ["News"]
    assert posts[1].tags is None
    mock_client.browse_posts.assert_called_once_with(
        limit=200,
        order="published_at DESC",
        formats="html",
        include="tags",
        filter="status:published",
    )


def test_fetch_recent_posts_empty(mock_client: MagicMock) -> None:
    """Test that a site without posts gives an empty list."""
    mock_client.browse_posts.return_value = []
    assert not fetch_recent_posts(mock_client)


def test_fetch_recent_posts_transport_error(mock_client: MagicMock) -> None:
    """Test that transport errors become a FetchError with the original message."""
    mock_client.browse_posts.side_effect = requests.exceptions.ConnectionError(
        "Connection refused"
    )

    with pytest.raises(FetchError, match="Failed to fetch posts from Ghost API: Connection refused"):
        fetch_recent_posts(mock_client)


def test_fetch_recent_posts_api_error(mock_client: MagicMock) -> None:
    """Test that API rejections become a FetchError."""
    mock_client.browse_posts.side_effect = GhostAPIError("Unknown Admin API Key", 401)

    with pytest.raises(FetchError, match="Unknown Admin API Key"):
        fetch_recent_posts(mock_client)


def test_fetch_recent_posts_shape_mismatch(mock_client: MagicMock) -> None:
    """Test that a post missing required fields fails explicitly."""
    mock_client.browse_posts.return_value = [{"title": "No url", "published_at": "garbage"}]

    with pytest.raises(FetchError):
        fetch_recent_posts(mock_client)


def test_fetch_recent_posts_non_object_body() -> None:
    """Test that a 200 response with a JSON array body becomes a FetchError."""
    session = MagicMock()
    session.request.return_value.ok = True
    session.request.return_value.json.return_value = [{"title": "Stray"}]
    client = GhostAdminClient(
        "https://blog.example.com", "65f1c0ffee:" + "a1" * 32, session=session
    )

    with pytest.raises(FetchError, match="not a JSON object"):
        fetch_recent_posts(client)


# --- Tests for publish_digest ---


def test_build_digest_post(weekly_config: DigestConfig) -> None:
    """Test the draft payload for a weekly digest."""
    window = compute_window(date(2024, 3, 10), "weekly", "America/Chicago")

    post = build_digest_post(weekly_config, window, "<h2>Post</h2>")

    assert post == {
        "title": "Weekly Digest (3/4 - 3/10)",
        "html": "<h2>Post</h2>",
        "tags": [{"name": "Digest"}, {"name": "Newsletter"}],
        "status": "draft",
    }


def test_publish_digest_returns_slug(
    mock_client: MagicMock, weekly_config: DigestConfig
) -> None:
    """Test that the created post's slug is returned and html source is requested."""
    mock_client.add_post.return_value = {"id": "9", "slug": "weekly-digest-3-4-3-10"}
    window = compute_window(date(2024, 3, 10), "weekly", "America/Chicago")

    slug = publish_digest(mock_client, weekly_config, window, "<p>x</p>")

    assert slug == "weekly-digest-3-4-3-10"
    _, kwargs = mock_client.add_post.call_args
    assert kwargs == {"source": "html"}


@pytest.mark.parametrize(
    "error",
    [
        GhostAPIError("Validation error, cannot save post."),
        requests.exceptions.Timeout("Read timed out"),
    ],
)
def test_publish_digest_failure(
    mock_client: MagicMock, weekly_config: DigestConfig, error: Exception
) -> None:
    """Test that API and transport failures become a PublishError without retry."""
    mock_client.add_post.side_effect = error
    window = compute_window(date(2024, 3, 10), "weekly", "America/Chicago")

    with pytest.raises(PublishError, match="Failed to create newsletter post"):
        publish_digest(mock_client, weekly_config, window, "<p>x</p>")
    assert mock_client.add_post.call_count == 1
