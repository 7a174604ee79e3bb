"""
Exceptions raised by the digest pipeline.

Every failure is terminal for the run: the runner turns a DigestError
into a logged message and a non-zero exit status.
"""


class DigestError(Exception):
    """Base class for failures that end a digest run."""


class ConfigurationError(DigestError):
    """Invalid or missing configuration (period, timezone, credentials)."""


class FetchError(DigestError):
    """Listing posts from the Ghost API failed."""


class PublishError(DigestError):
    """Creating the digest draft failed."""


class GhostAPIError(Exception):
    """The Ghost Admin API answered with an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
