"""
Ghost Admin API Client Module.

This module provides a small client for the two Admin API endpoints the
digest needs: browsing posts and creating a post. Requests are signed with
a short-lived JWT derived from the Admin API key.
"""

import logging
import time
from typing import Any, Optional

import requests
from jose import jwt

from .errors import ConfigurationError, GhostAPIError

logger = logging.getLogger(__name__)

# Ghost Admin API constants
GHOST_API_VERSION = "v5.0"
GHOST_ADMIN_PATH = "/ghost/api/admin"
TOKEN_AUDIENCE = "/admin/"
TOKEN_LIFETIME_SECONDS = 5 * 60
REQUEST_TIMEOUT_SECONDS = 60


def create_admin_token(api_key: str, issued_at: Optional[int] = None) -> str:
    """Create the JWT Ghost expects for Admin API requests.

    Args:
        api_key: Admin API key in the form '<id>:<hex secret>'.
        issued_at: Unix timestamp to use as 'iat'. Defaults to now.

    Returns:
        Encoded HS256 token.

    Raises:
        ConfigurationError: If the key is not in the expected format.
    """
    key_id, _, secret = api_key.partition(":")
    if not key_id or not secret:
        raise ConfigurationError("Ghost Admin API key must look like '<id>:<secret>'")
    try:
        secret_bytes = bytes.fromhex(secret)
    except ValueError as e:
        raise ConfigurationError("Ghost Admin API key secret is not hex encoded") from e

    iat = int(time.time()) if issued_at is None else issued_at
    claims = {"iat": iat, "exp": iat + TOKEN_LIFETIME_SECONDS, "aud": TOKEN_AUDIENCE}
    return jwt.encode(claims, secret_bytes, algorithm="HS256", headers={"kid": key_id})


def _error_message(response: requests.Response) -> str:
    """Extract a readable message from a Ghost error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and payload.get("errors"):
        messages = []
        for error in payload["errors"]:
            message = error.get("message") or error.get("type") or "Unknown error"
            if error.get("context"):
                message = f"{message} ({error['context']})"
            messages.append(message)
        return "; ".join(messages)

    return f"{response.status_code} {response.reason}"


class GhostAdminClient:
    """Client for the Ghost Admin API.

    Each request gets a fresh token, so a client can be reused for the
    whole run without worrying about expiry.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        version: str = GHOST_API_VERSION,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = f"{url.rstrip('/')}{GHOST_ADMIN_PATH}"
        self.api_key = api_key
        self.version = version
        self.timeout = timeout
        self.session = session or requests.Session()
        # Fail on a malformed key before any request goes out
        create_admin_token(api_key)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Ghost {create_admin_token(self.api_key)}",
            "Accept-Version": self.version,
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)

        response = self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not response.ok:
            message = _error_message(response)
            logger.error("Ghost API %s %s failed: %s", method, path, message)
            raise GhostAPIError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise GhostAPIError(f"Response is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise GhostAPIError("Response body is not a JSON object")
        return payload

    def browse_posts(self, **params: Any) -> list[dict[str, Any]]:
        """List posts. Keyword arguments are passed as query parameters."""
        payload = self._request("GET", "/posts/", params=params)
        posts = payload.get("posts")
        if not isinstance(posts, list):
            raise GhostAPIError("Response does not contain a 'posts' list")
        return posts

    def add_post(self, post: dict[str, Any], source: Optional[str] = None) -> dict[str, Any]:
        """Create a post and return the created resource.

        Args:
            post: Post fields (title, html, tags, status, ...).
            source: Set to 'html' to have Ghost convert the html field.
        """
        params = {"source": source} if source else None
        payload = self._request("POST", "/posts/", params=params, json={"posts": [post]})
        posts = payload.get("posts") or []
        if not isinstance(posts, list) or not posts or not isinstance(posts[0], dict):
            raise GhostAPIError("Response does not contain the created post")
        return posts[0]
