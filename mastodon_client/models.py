"""
Pydantic models for the Mastodon API responses mastodon_client interprets.

Endpoint wrappers return the parsed JSON untouched; these models cover the
few payloads the client itself has to read.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator


def _to_mapping(payload: Any) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        return payload
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    if hasattr(payload, "__dict__"):
        return _to_mapping(vars(payload))
    raise TypeError(f"Cannot convert payload of type {type(payload)!r} to mapping.")


class AppRegistration(BaseModel):
    """Response of ``POST /api/v1/apps``."""

    client_id: str
    client_secret: str
    id: str | None = None
    name: str | None = None
    redirect_uri: str | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_api(cls, payload: Any) -> "AppRegistration":
        return cls.model_validate(_to_mapping(payload))


class AccessToken(BaseModel):
    """Response of ``POST /oauth/token``."""

    access_token: str
    token_type: str | None = None
    scope: str = ""
    created_at: int | None = None
    refresh_token: str | None = None
    expires_in: float | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_api(cls, payload: Any) -> "AccessToken":
        return cls.model_validate(_to_mapping(payload))

    @property
    def scopes(self) -> list[str]:
        return self.scope.split()


class MediaAttachment(BaseModel):
    """Response of ``POST /api/v1/media``."""

    id: str
    type: str | None = None
    url: str | None = None
    preview_url: str | None = None
    description: str | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_api(cls, payload: Any) -> "MediaAttachment":
        return cls.model_validate(_to_mapping(payload))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        if isinstance(value, (int, float)):
            return str(int(value))
        if isinstance(value, str):
            return value
        raise TypeError("id must be serializable to str.")


def media_id_of(media: Any) -> str:
    """Reduce a media attachment (id, mapping or model) to its id."""

    if isinstance(media, (str, int)):
        return str(media)
    return MediaAttachment.from_api(media).id
