"""
Domain specific exception hierarchy for the mastodon_client package.

Every error exposes a ``kind`` tag so callers can tell rate-limit failures
(``"ratelimit"``) apart from everything else (``"error"``) without
``isinstance`` checks.
"""

from __future__ import annotations


class MastodonClientError(Exception):
    """Base exception for all library errors."""

    kind = "error"


class ConfigurationError(MastodonClientError):
    """Raised when required configuration is missing or invalid."""


class MissingCredentialError(ConfigurationError):
    """Raised when a client id is given without its secret (or neither is given)."""


class IllegalArgumentError(MastodonClientError, ValueError):
    """Raised when an API call receives an invalid combination of arguments."""


class InvalidMethodError(IllegalArgumentError):
    """Raised when a request uses an HTTP method other than GET, POST or DELETE."""


class InvalidVisibilityError(IllegalArgumentError):
    """Raised when a status visibility is not one of the accepted values."""


class AuthenticationError(MastodonClientError):
    """Raised when the OAuth token exchange fails."""


class ScopeMismatchError(AuthenticationError):
    """Raised when the server grants different scopes than were requested."""

    def __init__(self, message: str, *, requested: list[str], granted: list[str]) -> None:
        super().__init__(message)
        self.requested = requested
        self.granted = granted


class MediaValidationError(MastodonClientError):
    """Raised when media passed for upload cannot be described to the server."""


class UnknownMimeTypeError(MediaValidationError):
    """Raised when no MIME type was given and none could be inferred."""


class TransportError(MastodonClientError):
    """Raised when the HTTP request could not be completed (network, timeout)."""


class ApiResponseError(MastodonClientError):
    """Raised when the Mastodon API returns an error payload."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class NotFoundError(ApiResponseError):
    """Raised on HTTP 404."""


class ServerError(ApiResponseError):
    """Raised on HTTP 500."""


class MalformedResponseError(ApiResponseError):
    """Raised when the response body is not valid JSON."""

    def __init__(self, message: str, *, code: int | None = None, content: bytes | str | None = None) -> None:
        super().__init__(message, code=code)
        self.content = content


class RateLimitExceeded(ApiResponseError):
    """Raised when the Mastodon API throttles a request under the fail-fast policy."""

    kind = "ratelimit"

    def __init__(self, message: str, *, reset_at: float | None = None, code: int | None = None) -> None:
        super().__init__(message, code=code)
        self.reset_at = reset_at


class RateLimitParseError(RateLimitExceeded):
    """Raised when rate limit headers are present but cannot be interpreted."""
