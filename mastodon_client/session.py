"""
Client session: credentials, tokens and rate limit counters for one connection.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Mapping

from mastodon_client.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    CredentialSource,
    MastodonSettings,
    StoredValue,
    credential_source,
    read_credential_lines,
    write_credential_lines,
)
from mastodon_client.exceptions import ConfigurationError, MissingCredentialError
from mastodon_client.rate_limit import RateLimitPolicy, RateLimitState

logger = logging.getLogger(__name__)

DEFAULT_PACE_FACTOR = 1.1


class ClientSession:
    """
    State owned by one authenticated connection to a Mastodon instance.

    ``client_id`` may name a file written by ``create_app`` (client id on the
    first line, secret on the second) and ``access_token`` may name a file
    written by ``log_in`` (token on the first line). Either is resolved once,
    here.

    The rate limit counters are only updated by the request dispatcher. A
    session is not safe to share between threads.
    """

    def __init__(
        self,
        client_id: str | os.PathLike[str] | CredentialSource | None,
        client_secret: str | None = None,
        access_token: str | os.PathLike[str] | CredentialSource | None = None,
        *,
        api_base_url: str | None = None,
        ratelimit_method: RateLimitPolicy | str = RateLimitPolicy.BLOCK_AND_RETRY,
        ratelimit_pacefactor: float = DEFAULT_PACE_FACTOR,
        request_timeout: float = DEFAULT_TIMEOUT,
        debug_requests: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ratelimit_method = RateLimitPolicy.parse(ratelimit_method)
        self.pace_factor = _positive(ratelimit_pacefactor, "ratelimit_pacefactor")
        self.request_timeout = _positive(request_timeout, "request_timeout")
        self.api_base_url = (api_base_url or DEFAULT_BASE_URL).rstrip("/")
        self.debug_requests = debug_requests
        self.clock = clock

        self.client_id, self.client_secret = self._resolve_client_credential(
            credential_source(client_id), client_secret
        )
        self.access_token = self._resolve_access_token(credential_source(access_token))
        self.refresh_token: str | None = None
        self.token_expires_at: float | None = None

        now = clock()
        self.ratelimit = RateLimitState(reset_at=now, last_call_at=now)

    @classmethod
    def from_settings(cls, settings: MastodonSettings, **overrides: Any) -> "ClientSession":
        """Build a session from raw :class:`MastodonSettings` values."""

        options: dict[str, Any] = {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "access_token": settings.access_token,
            "api_base_url": settings.api_base_url,
        }
        if settings.ratelimit_method:
            options["ratelimit_method"] = settings.ratelimit_method
        if settings.ratelimit_pacefactor:
            options["ratelimit_pacefactor"] = _as_float(settings.ratelimit_pacefactor, "ratelimit_pacefactor")
        if settings.request_timeout:
            options["request_timeout"] = _as_float(settings.request_timeout, "request_timeout")
        options.update(overrides)
        return cls(**options)

    @property
    def ratelimit_method(self) -> RateLimitPolicy:
        return self._ratelimit_method

    # ------------------------------------------------------------------
    # Rate limit window
    # ------------------------------------------------------------------

    def update_from_response_headers(self, headers: Mapping[str, str], local_now: float | None = None) -> bool:
        """Refresh the rate limit window from response headers (see :class:`RateLimitState`)."""

        now = self.clock() if local_now is None else local_now
        updated = self.ratelimit.update_from_headers(headers, now)
        if updated:
            logger.debug(
                "Rate limit window: %s/%s remaining, resets in %.1fs.",
                self.ratelimit.remaining,
                self.ratelimit.limit,
                self.ratelimit.reset_at - now,
            )
        return updated

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def set_token_expiry(self, seconds: float) -> None:
        self.token_expires_at = self.clock() + seconds

    @property
    def token_expired(self) -> bool:
        if self.token_expires_at is None:
            return False
        return self.token_expires_at < self.clock()

    def persist_token(self, path: str | os.PathLike[str]) -> None:
        if not self.access_token:
            raise MissingCredentialError("No access token to persist.")
        write_credential_lines(Path(path), [self.access_token])

    def persist_client_credential(self, path: str | os.PathLike[str]) -> None:
        write_credential_lines(Path(path), [self.client_id, self.client_secret])

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_client_credential(
        source: CredentialSource | None, client_secret: str | None
    ) -> tuple[str, str]:
        if source is None:
            raise MissingCredentialError("Missing client id.")

        if isinstance(source, StoredValue):
            client_id, secret = _read_store(source, 2)
            if not client_id or not secret:
                raise MissingCredentialError(
                    f"Client credential file '{source.path}' must hold the id and secret on two lines."
                )
            return client_id, secret

        if not client_secret:
            raise MissingCredentialError("Specified client id directly, but did not supply secret.")
        return source.value, client_secret

    @staticmethod
    def _resolve_access_token(source: CredentialSource | None) -> str | None:
        if source is None:
            return None
        if isinstance(source, StoredValue):
            (token,) = _read_store(source, 1)
            return token
        return source.value or None


def _read_store(source: StoredValue, count: int) -> list[str | None]:
    try:
        return read_credential_lines(source.path, count)
    except OSError as exc:
        raise ConfigurationError(f"Could not read credential file '{source.path}': {exc}") from exc


def _as_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Setting '{name}' must be a number, got '{value}'.") from exc


def _positive(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"'{name}' must be a positive number, got {value!r}.")
    return float(value)
