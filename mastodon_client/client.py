"""
``Mastodon``: the public entry point wiring a session, dispatcher and services.
"""

from __future__ import annotations

import time
from typing import Any

from mastodon_client.clients.dispatcher import RequestDispatcher, Transport
from mastodon_client.rate_limit import SleepStrategy
from mastodon_client.services.account_service import AccountService
from mastodon_client.services.auth_service import AuthService, create_app
from mastodon_client.services.media_service import MediaService
from mastodon_client.services.status_service import StatusService
from mastodon_client.session import ClientSession


class Mastodon:
    """
    API wrapper for one Mastodon instance.

    ``client_id`` may be a literal id (then ``client_secret`` is required)
    or the path of a file written by :meth:`create_app`. ``access_token``
    may likewise be a literal token or a file written by :meth:`log_in`.

    Rate limits are handled according to ``ratelimit_method``:

    * ``"throw"`` raises ``RateLimitExceeded`` as soon as the server throttles;
    * ``"wait"`` (default) sleeps until the window resets and retries;
    * ``"pace"`` additionally spaces calls out so the limit is rarely hit.
      ``ratelimit_pacefactor`` (default 1.1) controls how eagerly.

    Even in ``wait`` and ``pace`` mode calls can still fail on network or
    server errors. An instance must not be shared between threads.
    """

    create_app = staticmethod(create_app)

    def __init__(
        self,
        client_id: Any,
        client_secret: str | None = None,
        access_token: Any = None,
        *,
        transport: Transport | None = None,
        sleep: SleepStrategy = time.sleep,
        **session_options: Any,
    ) -> None:
        self.session = ClientSession(client_id, client_secret, access_token, **session_options)
        self._wire(transport, sleep)

    @classmethod
    def from_session(
        cls,
        session: ClientSession,
        *,
        transport: Transport | None = None,
        sleep: SleepStrategy = time.sleep,
    ) -> "Mastodon":
        instance = cls.__new__(cls)
        instance.session = session
        instance._wire(transport, sleep)
        return instance

    def _wire(self, transport: Transport | None, sleep: SleepStrategy) -> None:
        self._owns_transport = transport is None
        self.dispatcher = RequestDispatcher(self.session, transport, sleep=sleep)
        self.auth = AuthService(self.dispatcher)
        self.statuses = StatusService(self.dispatcher)
        self.accounts = AccountService(self.dispatcher)
        self.media = MediaService(self.dispatcher, clock=self.session.clock)

    def close(self) -> None:
        """Release the HTTP connection pool if this client created its own transport."""

        if self._owns_transport:
            self.dispatcher.transport.close()

    def __enter__(self) -> "Mastodon":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def auth_request_url(self, *args: Any, **kwargs: Any) -> str:
        return self.auth.auth_request_url(*args, **kwargs)

    def log_in(self, *args: Any, **kwargs: Any) -> str:
        return self.auth.log_in(*args, **kwargs)

    @property
    def token_expired(self) -> bool:
        return self.session.token_expired

    # ------------------------------------------------------------------
    # Timelines and statuses
    # ------------------------------------------------------------------

    def timeline(self, timeline: str = "home", **options: Any) -> Any:
        return self.statuses.timeline(timeline, **options)

    def timeline_home(self, **options: Any) -> Any:
        return self.statuses.timeline_home(**options)

    def timeline_mentions(self, **options: Any) -> Any:
        return self.statuses.timeline_mentions(**options)

    def timeline_local(self, **options: Any) -> Any:
        return self.statuses.timeline_local(**options)

    def timeline_public(self, **options: Any) -> Any:
        return self.statuses.timeline_public(**options)

    def timeline_hashtag(self, hashtag: str, **options: Any) -> Any:
        return self.statuses.timeline_hashtag(hashtag, **options)

    def status(self, status_id: Any) -> Any:
        return self.statuses.status(status_id)

    def status_context(self, status_id: Any) -> Any:
        return self.statuses.status_context(status_id)

    def status_reblogged_by(self, status_id: Any) -> Any:
        return self.statuses.status_reblogged_by(status_id)

    def status_favourited_by(self, status_id: Any) -> Any:
        return self.statuses.status_favourited_by(status_id)

    def status_post(self, status: str, **options: Any) -> Any:
        return self.statuses.status_post(status, **options)

    def toot(self, status: str) -> Any:
        return self.statuses.toot(status)

    def status_delete(self, status_id: Any) -> Any:
        return self.statuses.status_delete(status_id)

    def status_reblog(self, status_id: Any) -> Any:
        return self.statuses.status_reblog(status_id)

    def status_unreblog(self, status_id: Any) -> Any:
        return self.statuses.status_unreblog(status_id)

    def status_favourite(self, status_id: Any) -> Any:
        return self.statuses.status_favourite(status_id)

    def status_unfavourite(self, status_id: Any) -> Any:
        return self.statuses.status_unfavourite(status_id)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def account(self, account_id: Any) -> Any:
        return self.accounts.account(account_id)

    def verify_credentials(self) -> Any:
        return self.accounts.verify_credentials()

    def account_statuses(self, account_id: Any, **options: Any) -> Any:
        return self.accounts.account_statuses(account_id, **options)

    def account_following(self, account_id: Any, **options: Any) -> Any:
        return self.accounts.account_following(account_id, **options)

    def account_followers(self, account_id: Any, **options: Any) -> Any:
        return self.accounts.account_followers(account_id, **options)

    def account_relationships(self, account_ids: Any) -> Any:
        return self.accounts.account_relationships(account_ids)

    def account_search(self, query: str, **options: Any) -> Any:
        return self.accounts.account_search(query, **options)

    def content_search(self, query: str, **options: Any) -> Any:
        return self.accounts.content_search(query, **options)

    def notifications(self, **options: Any) -> Any:
        return self.accounts.notifications(**options)

    def mutes(self) -> Any:
        return self.accounts.mutes()

    def blocks(self) -> Any:
        return self.accounts.blocks()

    def favourites(self) -> Any:
        return self.accounts.favourites()

    def follow_requests(self, **options: Any) -> Any:
        return self.accounts.follow_requests(**options)

    def account_follow(self, account_id: Any) -> Any:
        return self.accounts.account_follow(account_id)

    def account_unfollow(self, account_id: Any) -> Any:
        return self.accounts.account_unfollow(account_id)

    def account_block(self, account_id: Any) -> Any:
        return self.accounts.account_block(account_id)

    def account_unblock(self, account_id: Any) -> Any:
        return self.accounts.account_unblock(account_id)

    def account_mute(self, account_id: Any) -> Any:
        return self.accounts.account_mute(account_id)

    def account_unmute(self, account_id: Any) -> Any:
        return self.accounts.account_unmute(account_id)

    def follow_request_authorize(self, account_id: Any) -> Any:
        return self.accounts.follow_request_authorize(account_id)

    def follow_request_reject(self, account_id: Any) -> Any:
        return self.accounts.follow_request_reject(account_id)

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def media_post(self, media_file: Any, mime_type: str | None = None, **options: Any) -> Any:
        return self.media.media_post(media_file, mime_type, **options)

    # American spellings
    favorited_by = status_favourited_by
    favourited_by = status_favourited_by
    status_favorited_by = status_favourited_by
    status_favorite = status_favourite
    status_unfavorite = status_unfavourite
    favorites = favourites
