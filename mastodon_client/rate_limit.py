"""
Rate limiting state and the three pacing policies.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Callable, Mapping, Protocol

from mastodon_client.exceptions import ConfigurationError, RateLimitExceeded, RateLimitParseError

logger = logging.getLogger(__name__)

MAX_SLEEP_SECONDS = 5 * 60
THROTTLE_RETRY_FLOOR_SECONDS = 1.0
DEFAULT_RATELIMIT = 150

HEADER_LIMIT = "x-ratelimit-limit"
HEADER_REMAINING = "x-ratelimit-remaining"
HEADER_RESET = "x-ratelimit-reset"
HEADER_DATE = "date"


class RateLimitPolicy(str, Enum):
    """How the client reacts to the server's rate limits."""

    FAIL_FAST = "throw"
    BLOCK_AND_RETRY = "wait"
    PACE = "pace"

    @classmethod
    def parse(cls, value: "RateLimitPolicy | str") -> "RateLimitPolicy":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        aliases = {
            "throw": cls.FAIL_FAST,
            "fail-fast": cls.FAIL_FAST,
            "wait": cls.BLOCK_AND_RETRY,
            "block-and-retry": cls.BLOCK_AND_RETRY,
            "pace": cls.PACE,
        }
        try:
            return aliases[key]
        except KeyError:
            raise ConfigurationError(
                f"Invalid ratelimit method '{value}'. Use one of: throw, wait, pace."
            ) from None


class SleepStrategy(Protocol):
    """Strategy responsible for sleeping/backing off."""

    def __call__(self, seconds: float) -> None:
        raise NotImplementedError


@dataclass(slots=True)
class RateLimitState:
    """Counters for the current rate limit window, in local epoch seconds."""

    limit: int = DEFAULT_RATELIMIT
    remaining: int = DEFAULT_RATELIMIT
    reset_at: float = field(default_factory=time.time)
    last_call_at: float = field(default_factory=time.time)

    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    def update_from_headers(self, headers: Mapping[str, str], local_now: float) -> bool:
        """
        Refresh the window from response headers.

        Returns False (and changes nothing) when the response carries no rate
        limit headers. The server's reset time is shifted by the difference
        between the local clock and the server's ``Date`` header so that
        sleeping until ``reset_at`` is correct on a skewed client clock.

        Raises:
            RateLimitParseError: when the counters or reset time are unreadable.
        """

        lowered = {key.lower(): value for key, value in headers.items()}
        if lowered.get(HEADER_REMAINING) is None:
            return False

        try:
            remaining = int(lowered[HEADER_REMAINING])
            limit = int(lowered.get(HEADER_LIMIT, self.limit))
        except (TypeError, ValueError) as exc:
            raise RateLimitParseError(f"Rate limit counters could not be parsed: {exc}") from exc

        reset = parse_reset_header(lowered.get(HEADER_RESET))
        server_now = parse_date_header(lowered.get(HEADER_DATE))
        skew = local_now - server_now if server_now is not None else 0.0

        self.limit = limit
        self.remaining = min(remaining, limit)
        self.reset_at = reset + skew
        self.last_call_at = local_now
        return True


def parse_reset_header(value: str | None) -> float:
    """Parse ``X-RateLimit-Reset`` (ISO 8601 or epoch seconds) to epoch seconds."""

    if value is None or not str(value).strip():
        raise RateLimitParseError("Rate limit time calculations failed: missing reset header.")
    text = str(value).strip()
    try:
        reset = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(reset):
            raise RateLimitParseError(
                f"Rate limit time calculations failed: bad reset value '{text}'."
            )
        return reset
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise RateLimitParseError(
            f"Rate limit time calculations failed: bad reset value '{text}'."
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def parse_date_header(value: str | None) -> float | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def cap_sleep(seconds: float) -> float:
    """Clamp a wait to ``[0, MAX_SLEEP_SECONDS]``."""

    return min(max(seconds, 0.0), float(MAX_SLEEP_SECONDS))


def compute_reset_wait(state: RateLimitState, now: float) -> float:
    return cap_sleep(state.reset_at - now)


def compute_pace_wait(state: RateLimitState, now: float, pace_factor: float) -> float:
    """
    Seconds to wait before the next call under the ``pace`` policy.

    Assumes a constant request rate: the time left in the window is spread
    evenly over the remaining requests, minus the time already elapsed since
    the previous call. The result is divided by ``pace_factor`` so we sleep a
    little less than the ideal spacing.
    """

    if state.remaining <= 0:
        return compute_reset_wait(state, now)

    ideal_spacing = (state.reset_at - now) / state.remaining
    elapsed = now - state.last_call_at
    wait = ideal_spacing - elapsed
    if wait <= 0:
        return 0.0
    return cap_sleep(wait / pace_factor)


@dataclass(slots=True)
class RateLimiter:
    """Applies a :class:`RateLimitPolicy` to a session's :class:`RateLimitState`."""

    policy: RateLimitPolicy = RateLimitPolicy.BLOCK_AND_RETRY
    pace_factor: float = 1.1
    sleep: SleepStrategy = field(default=time.sleep)
    clock: Callable[[], float] = field(default=time.time)

    def before_call(self, state: RateLimitState) -> float:
        """
        Pre-call pacing. Returns the number of seconds slept.

        An exhausted window blocks until ``reset_at`` has passed, one capped
        sleep at a time, under both the ``wait`` and ``pace`` policies.
        """

        if self.policy is RateLimitPolicy.FAIL_FAST:
            return 0.0

        slept = 0.0
        while state.is_exhausted() and state.reset_at > self.clock():
            slept += self.sleep_for(compute_reset_wait(state, self.clock()))

        if self.policy is RateLimitPolicy.PACE and not state.is_exhausted():
            slept += self.sleep_for(compute_pace_wait(state, self.clock(), self.pace_factor))
        return slept

    def on_throttled(self, state: RateLimitState) -> float:
        """
        Decide what to do after the server throttled a request.

        Returns the delay before retrying.

        Raises:
            RateLimitExceeded: under the fail-fast policy.
        """

        if self.policy is RateLimitPolicy.FAIL_FAST:
            raise RateLimitExceeded("Hit rate limit.", reset_at=state.reset_at)
        return max(compute_reset_wait(state, self.clock()), THROTTLE_RETRY_FLOOR_SECONDS)

    def sleep_for(self, seconds: float) -> float:
        duration = cap_sleep(seconds)
        if duration <= 0:
            return 0.0
        logger.info("Rate limit: sleeping %.2f seconds (policy=%s).", duration, self.policy.value)
        self.sleep(duration)
        return duration
