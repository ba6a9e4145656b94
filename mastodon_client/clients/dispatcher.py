"""
Request dispatcher: the single path every API call takes.

One call moves through ``dispatch`` as a loop of attempts. Each attempt
returns a tagged outcome:

* ``Completed(body)`` - the parsed JSON is handed back to the caller;
* ``Retry(after)`` - the server throttled us and the policy allows waiting;
* ``Failed(error)`` - the error is raised to the caller.

Sleeping happens in one place (``RateLimiter.sleep_for``), which also
enforces the five minute cap.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Union

from mastodon_client.clients.requests_transport import RequestsTransport
from mastodon_client.encoding import form_decode, form_encode
from mastodon_client.exceptions import (
    ApiResponseError,
    InvalidMethodError,
    MalformedResponseError,
    MastodonClientError,
    NotFoundError,
    RateLimitExceeded,
    RateLimitParseError,
    ServerError,
    TransportError,
)
from mastodon_client.rate_limit import RateLimiter, SleepStrategy
from mastodon_client.session import ClientSession

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "DELETE"})
QUERY_METHODS = frozenset({"GET", "DELETE"})
THROTTLED_ERROR = "Throttled"
HTTP_TOO_MANY_REQUESTS = 429
REDACTED_PARAMS = frozenset({"password", "client_secret", "access_token", "refresh_token", "code"})


class TransportResponse(Protocol):
    """What the dispatcher needs from an HTTP response."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes

    def json(self) -> Any:
        ...


class Transport(Protocol):
    """HTTP collaborator. Must raise ``TransportError`` on network failures."""

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
        files: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        ...


@dataclass(frozen=True, slots=True)
class ApiRequest:
    """One logical API call."""

    method: str
    endpoint: str
    params: Mapping[str, Any] = field(default_factory=dict)
    files: Mapping[str, Any] | None = None
    ratelimited: bool = True


@dataclass(frozen=True, slots=True)
class Completed:
    body: Any


@dataclass(frozen=True, slots=True)
class Retry:
    after: float


@dataclass(frozen=True, slots=True)
class Failed:
    error: MastodonClientError


Outcome = Union[Completed, Retry, Failed]


def parse_response(response: TransportResponse) -> Any:
    """
    Map HTTP status codes to errors and decode the JSON body.

    Statuses other than 404 and 500 are not errors here: Mastodon reports
    most failures in the JSON body, which is returned as-is.

    Raises:
        NotFoundError: on HTTP 404.
        ServerError: on HTTP 500.
        MalformedResponseError: when the body is not JSON.
    """

    status = response.status_code
    if status == 404:
        raise NotFoundError("Endpoint not found.", code=status)
    if status == 500:
        raise ServerError("General API problem.", code=status)

    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(
            f"Could not parse response as JSON, response code was {status}, "
            f"bad json content was {response.content!r}.",
            code=status,
            content=response.content,
        ) from exc


def is_throttled(status_code: int, body: Any) -> bool:
    if status_code == HTTP_TOO_MANY_REQUESTS:
        return True
    return isinstance(body, Mapping) and body.get("error") == THROTTLED_ERROR


def _redact(params: Mapping[str, Any]) -> dict[str, Any]:
    return {key: ("<redacted>" if key in REDACTED_PARAMS else value) for key, value in params.items()}


class RequestDispatcher:
    """Sends :class:`ApiRequest` objects on behalf of a :class:`ClientSession`."""

    def __init__(
        self,
        session: ClientSession,
        transport: Transport | None = None,
        *,
        sleep: SleepStrategy = time.sleep,
    ) -> None:
        self.session = session
        self.transport = transport or RequestsTransport()
        self.limiter = RateLimiter(
            policy=session.ratelimit_method,
            pace_factor=session.pace_factor,
            sleep=sleep,
            clock=session.clock,
        )

    def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.dispatch(ApiRequest("GET", endpoint, params or {}))

    def post(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        files: Mapping[str, Any] | None = None,
        ratelimited: bool = True,
    ) -> Any:
        return self.dispatch(ApiRequest("POST", endpoint, params or {}, files, ratelimited))

    def delete(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.dispatch(ApiRequest("DELETE", endpoint, params or {}))

    def dispatch(self, request: ApiRequest) -> Any:
        """
        Perform ``request``, retrying after throttling when the policy allows.

        Raises:
            InvalidMethodError: for methods other than GET, POST and DELETE.
            TransportError: when the request could not be sent (never retried).
            ApiResponseError: for 404/500/unparseable responses and, under the
                fail-fast policy, ``RateLimitExceeded``.
        """

        if request.method not in ALLOWED_METHODS:
            raise InvalidMethodError(f"Invalid method {request.method!r}.")

        while True:
            outcome = self._attempt(request)
            if isinstance(outcome, Completed):
                return outcome.body
            if isinstance(outcome, Failed):
                raise outcome.error
            logger.info("Throttled on %s %s, retrying.", request.method, request.endpoint)
            self.limiter.sleep_for(outcome.after)

    def _attempt(self, request: ApiRequest) -> Outcome:
        state = self.session.ratelimit
        if request.ratelimited:
            self.limiter.before_call(state)

        headers = self._build_headers()
        url, data = self._prepare(request, headers)
        self._log_request(request, headers)

        try:
            response = self.transport.request(
                request.method,
                url,
                data=data,
                headers=headers,
                files=request.files,
                timeout=self.session.request_timeout,
            )
        except TransportError as exc:
            return Failed(exc)

        self._log_response(response)

        try:
            body = parse_response(response)
        except ApiResponseError as exc:
            return Failed(exc)

        if request.ratelimited:
            try:
                self.session.update_from_response_headers(response.headers, self.session.clock())
            except RateLimitParseError as exc:
                return Failed(exc)

        if is_throttled(response.status_code, body):
            try:
                return Retry(self.limiter.on_throttled(state))
            except RateLimitExceeded as exc:
                exc.code = response.status_code
                return Failed(exc)

        return Completed(body)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        return headers

    def _prepare(self, request: ApiRequest, headers: dict[str, str]) -> tuple[str, Any]:
        url = f"{self.session.api_base_url}{request.endpoint}"
        encoded = form_encode(request.params)

        if request.method in QUERY_METHODS:
            return (f"{url}?{encoded}" if encoded else url), None
        if request.files:
            # Multipart bodies are built by the transport from plain pairs.
            return url, form_decode(encoded)
        if encoded:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            return url, encoded
        return url, None

    def _log_request(self, request: ApiRequest, headers: Mapping[str, str]) -> None:
        if self.session.debug_requests:
            logger.debug(
                'Request to endpoint "%s" using method "%s". Parameters: %s. Authorized: %s. Files: %s.',
                request.endpoint,
                request.method,
                _redact(request.params),
                "Authorization" in headers,
                sorted(request.files or {}),
            )
        else:
            logger.debug(
                "%s %s params=%s",
                request.method,
                request.endpoint,
                sorted(request.params),
            )

    def _log_response(self, response: TransportResponse) -> None:
        if self.session.debug_requests:
            logger.debug(
                "Response received with code %s. Headers: %s. Content: %r.",
                response.status_code,
                dict(response.headers),
                response.content,
            )
        else:
            logger.debug("Response status %s.", response.status_code)
