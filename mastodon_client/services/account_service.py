"""
Account lookups and social actions (follow, block, mute, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

from mastodon_client.encoding import generate_params


class AccountDispatcher(Protocol):
    """Protocol subset consumed by the service."""

    def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    def post(self, endpoint: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        ...


@dataclass(slots=True)
class AccountService:
    """Read-only account listings plus the state-changing relationship calls."""

    dispatcher: AccountDispatcher

    def account(self, account_id: str | int) -> Any:
        return self.dispatcher.get(f"/api/v1/accounts/{account_id}")

    def verify_credentials(self) -> Any:
        """Return the account the access token belongs to."""

        return self.dispatcher.get("/api/v1/accounts/verify_credentials")

    def account_statuses(self, account_id: str | int, **options: Any) -> Any:
        return self.dispatcher.get(f"/api/v1/accounts/{account_id}/statuses", generate_params(options))

    def account_following(self, account_id: str | int, **options: Any) -> Any:
        return self.dispatcher.get(f"/api/v1/accounts/{account_id}/following", generate_params(options))

    def account_followers(self, account_id: str | int, **options: Any) -> Any:
        return self.dispatcher.get(f"/api/v1/accounts/{account_id}/followers", generate_params(options))

    def account_relationships(self, account_ids: str | int | Iterable[str | int]) -> Any:
        """Relationships of the logged-in user with one or more accounts."""

        if isinstance(account_ids, (str, int)):
            account_ids = [account_ids]
        params = generate_params({"id": [str(account_id) for account_id in account_ids]})
        return self.dispatcher.get("/api/v1/accounts/relationships", params)

    def account_search(self, query: str, **options: Any) -> Any:
        return self.dispatcher.get("/api/v1/accounts/search", generate_params({**options, "q": query}))

    def content_search(self, query: str, **options: Any) -> Any:
        """Search accounts, statuses and hashtags."""

        return self.dispatcher.get("/api/v1/search", generate_params({**options, "q": query}))

    # ------------------------------------------------------------------
    # Listings of the logged-in user
    # ------------------------------------------------------------------

    def notifications(self, **options: Any) -> Any:
        return self.dispatcher.get("/api/v1/notifications", generate_params(options))

    def mutes(self) -> Any:
        return self.dispatcher.get("/api/v1/mutes")

    def blocks(self) -> Any:
        return self.dispatcher.get("/api/v1/blocks")

    def favourites(self) -> Any:
        return self.dispatcher.get("/api/v1/favourites")

    def follow_requests(self, **options: Any) -> Any:
        return self.dispatcher.get("/api/v1/follow_requests", generate_params(options))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def account_follow(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "follow")

    def account_unfollow(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "unfollow")

    def account_block(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "block")

    def account_unblock(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "unblock")

    def account_mute(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "mute")

    def account_unmute(self, account_id: str | int) -> Any:
        return self._account_action(account_id, "unmute")

    def follow_request_authorize(self, account_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/follow_requests/{account_id}/authorize")

    def follow_request_reject(self, account_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/follow_requests/{account_id}/reject")

    def _account_action(self, account_id: str | int, action: str) -> Any:
        return self.dispatcher.post(f"/api/v1/accounts/{account_id}/{action}")
