"""
Timeline and status workflows built on top of the request dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol
from urllib.parse import quote

from mastodon_client.encoding import generate_params
from mastodon_client.exceptions import InvalidVisibilityError
from mastodon_client.models import media_id_of

VALID_VISIBILITIES = frozenset({"", "private", "public", "unlisted"})


class StatusDispatcher(Protocol):
    """Protocol subset consumed by the service."""

    def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    def post(self, endpoint: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        ...

    def delete(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        ...


@dataclass(slots=True)
class StatusService:
    """Timelines, single statuses and the actions that can be taken on them."""

    dispatcher: StatusDispatcher

    # ------------------------------------------------------------------
    # Timelines
    # ------------------------------------------------------------------

    def timeline(self, timeline: str = "home", **options: Any) -> Any:
        """
        Fetch statuses, most recent first.

        ``timeline`` is one of ``home``, ``mentions``, ``local``, ``public``
        or ``tag/<hashtag>``. ``local`` is the public timeline restricted to
        this instance. Remaining keyword arguments (``max_id``, ``since_id``,
        ``limit``...) are passed through as query parameters.
        """

        if timeline == "local":
            timeline = "public"
            options["local"] = True
        params = generate_params(options)
        return self.dispatcher.get(f"/api/v1/timelines/{timeline}", params)

    def timeline_home(self, **options: Any) -> Any:
        return self.timeline("home", **options)

    def timeline_mentions(self, **options: Any) -> Any:
        return self.timeline("mentions", **options)

    def timeline_local(self, **options: Any) -> Any:
        return self.timeline("local", **options)

    def timeline_public(self, **options: Any) -> Any:
        return self.timeline("public", **options)

    def timeline_hashtag(self, hashtag: str, **options: Any) -> Any:
        return self.timeline(f"tag/{quote(hashtag, safe='')}", **options)

    # ------------------------------------------------------------------
    # Reading statuses
    # ------------------------------------------------------------------

    def status(self, status_id: str | int) -> Any:
        return self.dispatcher.get(f"/api/v1/statuses/{status_id}")

    def status_context(self, status_id: str | int) -> Any:
        return self.dispatcher.get(f"/api/v1/statuses/{status_id}/context")

    def status_reblogged_by(self, status_id: str | int) -> Any:
        return self.dispatcher.get(f"/api/v1/statuses/{status_id}/reblogged_by")

    def status_favourited_by(self, status_id: str | int) -> Any:
        return self.dispatcher.get(f"/api/v1/statuses/{status_id}/favourited_by")

    # ------------------------------------------------------------------
    # Writing statuses
    # ------------------------------------------------------------------

    def status_post(
        self,
        status: str,
        *,
        in_reply_to_id: str | int | None = None,
        media_ids: Iterable[Any] | None = None,
        sensitive: bool = False,
        visibility: str = "",
        spoiler_text: str | None = None,
        **extra: Any,
    ) -> Any:
        """
        Post a status, optionally replying to another one.

        ``media_ids`` may hold ids or the media objects returned by
        ``media_post``. ``visibility`` is ``private``, ``unlisted`` or
        ``public`` (any case); empty uses the account default.

        Raises:
            InvalidVisibilityError: for any other visibility value.
        """

        visibility = visibility or ""
        if visibility.lower() not in VALID_VISIBILITIES:
            raise InvalidVisibilityError(
                f"Invalid visibility value '{visibility}'! Acceptable values are "
                f"{sorted(VALID_VISIBILITIES)}."
            )

        payload: dict[str, Any] = {
            "status": status,
            "in_reply_to_id": in_reply_to_id,
            "visibility": visibility or None,
            "spoiler_text": spoiler_text,
        }
        if sensitive:
            payload["sensitive"] = True
        if media_ids:
            payload["media_ids"] = [media_id_of(media) for media in media_ids]
        payload.update(extra)
        return self.dispatcher.post("/api/v1/statuses", generate_params(payload))

    def toot(self, status: str) -> Any:
        return self.status_post(status)

    def status_delete(self, status_id: str | int) -> Any:
        return self.dispatcher.delete(f"/api/v1/statuses/{status_id}")

    def status_reblog(self, status_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/statuses/{status_id}/reblog")

    def status_unreblog(self, status_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/statuses/{status_id}/unreblog")

    def status_favourite(self, status_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/statuses/{status_id}/favourite")

    def status_unfavourite(self, status_id: str | int) -> Any:
        return self.dispatcher.post(f"/api/v1/statuses/{status_id}/unfavourite")
