"""
Thin wrapper around requests.Session to present the transport interface.
"""

from __future__ import annotations

from typing import Any, Mapping

import requests

from mastodon_client.exceptions import TransportError

USER_AGENT = "mastodon_client/0.1 (+https://github.com/mastodon/mastodon)"


class RequestsTransport:
    """Transport that converts requests exceptions into domain exceptions."""

    def __init__(self, session: requests.Session | None = None) -> None:
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self._session = session

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
        files: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        try:
            return self._session.request(
                method,
                url,
                data=data,
                headers=dict(headers or {}),
                files=files or None,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Could not complete request: {exc}") from exc

    def close(self) -> None:
        self._session.close()
