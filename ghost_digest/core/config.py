"""
Configuration loading for the Ghost Digest Pipeline.

The configuration is read once from a mapping of named inputs (usually
``os.environ`` after ``load_dotenv``) and handed to every component as an
immutable ``DigestConfig``. No component reads the environment directly.
"""

import logging
from typing import List, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TAGS = "Digest"
DEFAULT_TIMEZONE = "America/Chicago"

# Input names
URL_KEY = "GHOST_URL"
API_KEY_KEY = "GHOST_API_KEY"
PERIOD_KEY = "DIGEST_PERIOD"
DEBUG_KEY = "DIGEST_DEBUG"
TAGS_KEY = "DIGEST_TAGS"
EXCLUDED_TAGS_KEY = "DIGEST_EXCLUDED_TAGS"
TIMEZONE_KEY = "DIGEST_TIMEZONE"
TITLE_KEY = "DIGEST_TITLE"
FULL_ARTICLE_KEY = "DIGEST_FULL_ARTICLE"


class DigestConfig(BaseModel):
    """Settings for a single digest run."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Ghost site base address")
    api_key: str = Field(..., repr=False, description="Ghost Admin API key")
    period: str = Field(..., description="'daily', 'weekly' or a YYYY-MM-DD date")
    debug: bool = False
    tags: List[str] = Field(default_factory=lambda: [DEFAULT_TAGS])
    excluded_tags: List[str] = Field(default_factory=list)
    timezone: str = DEFAULT_TIMEZONE
    title: str
    full_article: bool = False


def parse_flag(value: str | None) -> bool:
    """Return True only for the literal 'true' (case-insensitive)."""
    return (value or "").strip().lower() == "true"


def parse_tag_list(value: str | None) -> List[str]:
    """Split a comma-separated tag list, trimming entries and dropping empty ones."""
    return [tag.strip() for tag in (value or "").split(",") if tag.strip()]


def default_title(period: str) -> str:
    """Build the '<Capitalized period> Digest' title."""
    return f"{period[:1].upper()}{period[1:]} Digest"


def load_digest_config(inputs: Mapping[str, str]) -> DigestConfig:
    """Build a DigestConfig from named inputs.

    Args:
        inputs: Mapping of input names to raw string values.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigurationError: If a required input is missing or the timezone
            is unknown.
    """
    url = (inputs.get(URL_KEY) or "").strip()
    api_key = (inputs.get(API_KEY_KEY) or "").strip()
    period = (inputs.get(PERIOD_KEY) or "").strip()

    missing = [
        name
        for name, value in ((URL_KEY, url), (PERIOD_KEY, period), (API_KEY_KEY, api_key))
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required inputs: {', '.join(missing)}")

    timezone = (inputs.get(TIMEZONE_KEY) or "").strip() or DEFAULT_TIMEZONE
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {timezone}") from e

    config = DigestConfig(
        url=url.rstrip("/"),
        api_key=api_key,
        period=period,
        debug=parse_flag(inputs.get(DEBUG_KEY)),
        tags=parse_tag_list(inputs.get(TAGS_KEY) or DEFAULT_TAGS),
        excluded_tags=parse_tag_list(inputs.get(EXCLUDED_TAGS_KEY)),
        timezone=timezone,
        title=(inputs.get(TITLE_KEY) or "").strip() or default_title(period),
        full_article=parse_flag(inputs.get(FULL_ARTICLE_KEY)),
    )
    logger.debug("Excluded tags: %s", ", ".join(config.excluded_tags))
    return config
