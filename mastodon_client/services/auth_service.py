"""
App registration and OAuth token exchange.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol
from urllib.parse import urlencode

from pydantic import ValidationError

from mastodon_client.clients.dispatcher import ApiRequest, Transport, parse_response
from mastodon_client.clients.requests_transport import RequestsTransport
from mastodon_client.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    StoredValue,
    credential_source,
    read_credential_lines,
    write_credential_lines,
)
from mastodon_client.encoding import form_encode, generate_params
from mastodon_client.exceptions import (
    ApiResponseError,
    AuthenticationError,
    IllegalArgumentError,
    MalformedResponseError,
    RateLimitExceeded,
    ScopeMismatchError,
)
from mastodon_client.models import AccessToken, AppRegistration
from mastodon_client.session import ClientSession

logger = logging.getLogger(__name__)

OOB_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"
DEFAULT_SCOPES = ("read", "write", "follow")


class AuthDispatcher(Protocol):
    """Protocol subset consumed by the service."""

    session: ClientSession

    def dispatch(self, request: ApiRequest) -> Any:
        ...


def create_app(
    client_name: str,
    *,
    scopes: Iterable[str] = DEFAULT_SCOPES,
    redirect_uris: str | None = None,
    website: str | None = None,
    to_file: str | os.PathLike[str] | None = None,
    api_base_url: str = DEFAULT_BASE_URL,
    request_timeout: float = DEFAULT_TIMEOUT,
    transport: Transport | None = None,
) -> tuple[str, str]:
    """
    Register a new application and return ``(client_id, client_secret)``.

    The request is unauthenticated and not subject to rate limit accounting.
    Pass ``to_file`` to persist the credentials in the two-line format
    ``ClientSession`` accepts as ``client_id``.

    Raises:
        IllegalArgumentError: when ``client_name`` is empty.
        ApiResponseError: when the server rejects the registration.
    """

    if not client_name:
        raise IllegalArgumentError("Missing client name.")

    params = {
        "client_name": client_name,
        "scopes": " ".join(scopes),
        "redirect_uris": redirect_uris or OOB_REDIRECT_URI,
        "website": website,
    }
    http = transport or RequestsTransport()
    response = http.request(
        "POST",
        f"{api_base_url.rstrip('/')}/api/v1/apps",
        data=form_encode(params),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=request_timeout,
    )
    body = parse_response(response)
    if isinstance(body, Mapping) and body.get("error"):
        raise ApiResponseError(str(body["error"]), code=response.status_code)

    try:
        app = AppRegistration.from_api(body)
    except (TypeError, ValidationError) as exc:
        raise MalformedResponseError(
            f"Unexpected app registration response: {body!r}", code=response.status_code
        ) from exc

    if to_file is not None:
        write_credential_lines(Path(to_file), [app.client_id, app.client_secret])
    logger.info("Registered application '%s' on %s.", client_name, api_base_url)
    return app.client_id, app.client_secret


@dataclass(slots=True)
class AuthService:
    """OAuth token exchange for an existing :class:`ClientSession`."""

    dispatcher: AuthDispatcher

    @property
    def session(self) -> ClientSession:
        return self.dispatcher.session

    def auth_request_url(
        self,
        client_id: str | os.PathLike[str] | None = None,
        redirect_uris: str = OOB_REDIRECT_URI,
        scopes: Iterable[str] = DEFAULT_SCOPES,
    ) -> str:
        """Return the URL a user has to visit to grant this app an authorization code."""

        if client_id is None:
            resolved_id = self.session.client_id
        else:
            source = credential_source(client_id)
            if isinstance(source, StoredValue):
                (resolved_id,) = read_credential_lines(source.path, 1)
            else:
                resolved_id = source.value

        query = urlencode(
            {
                "client_id": resolved_id,
                "response_type": "code",
                "redirect_uri": redirect_uris,
                "scope": " ".join(scopes),
            }
        )
        return f"{self.session.api_base_url}/oauth/authorize?{query}"

    def log_in(
        self,
        username: str | None = None,
        password: str | None = None,
        *,
        code: str | None = None,
        refresh_token: str | None = None,
        scopes: Iterable[str] = DEFAULT_SCOPES,
        redirect_uri: str = OOB_REDIRECT_URI,
        to_file: str | os.PathLike[str] | None = None,
    ) -> str:
        """
        Exchange a password, authorization code or refresh token for an access token.

        The grant type is picked in that order of priority. The token is
        stored on the session and, with ``to_file``, persisted as a one-line
        file ``ClientSession`` accepts as ``access_token``.

        Raises:
            IllegalArgumentError: when no usable grant was supplied.
            AuthenticationError: when the server refuses the exchange.
            ScopeMismatchError: when the granted scopes differ from the requested ones.
        """

        requested = sorted(scopes)
        options = {
            "username": username,
            "password": password,
            "code": code,
            "refresh_token": refresh_token,
            "redirect_uri": redirect_uri,
        }
        if username and password:
            params = generate_params(options, ("code", "refresh_token"))
            params["grant_type"] = "password"
        elif code:
            params = generate_params(options, ("username", "password", "refresh_token"))
            params["grant_type"] = "authorization_code"
        elif refresh_token:
            params = generate_params(options, ("username", "password", "code"))
            params["grant_type"] = "refresh_token"
        else:
            raise IllegalArgumentError(
                "Invalid arguments given. username and password, code or refresh_token are required."
            )

        params["scope"] = " ".join(requested)
        params["client_id"] = self.session.client_id
        params["client_secret"] = self.session.client_secret

        try:
            body = self.dispatcher.dispatch(ApiRequest("POST", "/oauth/token", params, ratelimited=False))
        except RateLimitExceeded:
            raise
        except ApiResponseError as exc:
            raise AuthenticationError(self._failure_message(params["grant_type"], exc)) from exc

        if isinstance(body, Mapping) and body.get("error"):
            message = body.get("error_description") or body["error"]
            raise AuthenticationError(self._failure_message(params["grant_type"], message))

        try:
            token = AccessToken.from_api(body)
        except (TypeError, ValidationError) as exc:
            raise AuthenticationError(f"Unexpected token response: {body!r}") from exc

        session = self.session
        session.access_token = token.access_token
        session.refresh_token = token.refresh_token
        if token.expires_in is not None:
            session.set_token_expiry(token.expires_in)

        granted = sorted(token.scopes)
        if granted != requested:
            raise ScopeMismatchError(
                f'Granted scopes "{" ".join(granted)}" differ from requested scopes "{" ".join(requested)}".',
                requested=requested,
                granted=granted,
            )

        if to_file is not None:
            session.persist_token(to_file)
        logger.info("Logged in using the %s grant.", params["grant_type"])
        return token.access_token

    @staticmethod
    def _failure_message(grant_type: str, reason: object) -> str:
        if grant_type in ("password", "authorization_code"):
            return f"Invalid user name, password, or redirect_uris: {reason}"
        return f"Invalid request: {reason}"
