"""
Client library for the Mastodon HTTP API with rate limit aware dispatching.
"""

from mastodon_client.client import Mastodon
from mastodon_client.config import ConfigManager, MastodonSettings
from mastodon_client.exceptions import (
    ApiResponseError,
    AuthenticationError,
    ConfigurationError,
    IllegalArgumentError,
    InvalidMethodError,
    InvalidVisibilityError,
    MalformedResponseError,
    MastodonClientError,
    MediaValidationError,
    MissingCredentialError,
    NotFoundError,
    RateLimitExceeded,
    RateLimitParseError,
    ScopeMismatchError,
    ServerError,
    TransportError,
    UnknownMimeTypeError,
)
from mastodon_client.factory import MastodonClientFactory
from mastodon_client.rate_limit import RateLimitPolicy
from mastodon_client.session import ClientSession

__version__ = "0.1.0"

__all__ = [
    "ApiResponseError",
    "AuthenticationError",
    "ClientSession",
    "ConfigManager",
    "ConfigurationError",
    "IllegalArgumentError",
    "InvalidMethodError",
    "InvalidVisibilityError",
    "MalformedResponseError",
    "Mastodon",
    "MastodonClientError",
    "MastodonClientFactory",
    "MastodonSettings",
    "MediaValidationError",
    "MissingCredentialError",
    "NotFoundError",
    "RateLimitExceeded",
    "RateLimitParseError",
    "RateLimitPolicy",
    "ScopeMismatchError",
    "ServerError",
    "TransportError",
    "UnknownMimeTypeError",
    "__version__",
]
