"""
Configuration management utilities for mastodon_client.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping, Sequence, Union

from dotenv import dotenv_values

from mastodon_client.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://mastodon.social"
DEFAULT_TIMEOUT = 300.0

ENV_VAR_MAP = {
    "api_base_url": "MASTODON_API_BASE_URL",
    "client_id": "MASTODON_CLIENT_ID",
    "client_secret": "MASTODON_CLIENT_SECRET",
    "access_token": "MASTODON_ACCESS_TOKEN",
    "ratelimit_method": "MASTODON_RATELIMIT_METHOD",
    "ratelimit_pacefactor": "MASTODON_RATELIMIT_PACEFACTOR",
    "request_timeout": "MASTODON_REQUEST_TIMEOUT",
}


# ----------------------------------------------------------------------------
# Credential sources
# ----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LiteralValue:
    """A credential given directly by the caller."""

    value: str


@dataclass(frozen=True, slots=True)
class StoredValue:
    """A credential to be read from a line-oriented file."""

    path: Path


CredentialSource = Union[LiteralValue, StoredValue]


def credential_source(value: "str | os.PathLike[str] | CredentialSource | None") -> CredentialSource | None:
    """
    Classify ``value`` once: an existing file path is a :class:`StoredValue`,
    anything else is taken literally.
    """

    if value is None or isinstance(value, (LiteralValue, StoredValue)):
        return value
    if isinstance(value, os.PathLike):
        return StoredValue(Path(value))
    if value and os.path.isfile(value):
        return StoredValue(Path(value))
    return LiteralValue(value)


def read_credential_lines(path: Path, count: int) -> list[str | None]:
    """Return the first ``count`` lines of ``path`` (missing lines are None)."""

    with Path(path).open("r", encoding="utf-8") as fp:
        lines = [line.rstrip("\r\n") for line in fp]
    padded: list[str | None] = [line or None for line in lines[:count]]
    padded.extend([None] * (count - len(padded)))
    return padded


def write_credential_lines(path: Path, lines: Sequence[str]) -> None:
    """Write ``lines`` to ``path`` (one per line), readable by the owner only."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        for line in lines:
            fp.write(f"{line}\n")
    os.chmod(target, 0o600)


# ----------------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------------


@dataclass(slots=True)
class MastodonSettings:
    """Raw client settings as found in the environment, a .env file or JSON."""

    api_base_url: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    access_token: str | None = None
    ratelimit_method: str | None = None
    ratelimit_pacefactor: str | None = None
    request_timeout: str | None = None

    def is_empty(self) -> bool:
        return all(value in (None, "") for value in asdict(self).values())

    def merge(self, other: "MastodonSettings") -> "MastodonSettings":
        """Merge setting sets, preferring non-null values from ``other``."""

        mine = asdict(self)
        theirs = asdict(other)
        return MastodonSettings(**{key: theirs[key] or mine[key] for key in mine})

    def to_dict(self) -> dict[str, str]:
        return {
            key: str(value)
            for key, value in asdict(self).items()
            if value not in (None, "")
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MastodonSettings":
        values: dict[str, str | None] = {}
        for key in ENV_VAR_MAP:
            value = data.get(key)
            values[key] = None if value is None else str(value)
        return cls(**values)


class ConfigManager:
    """Loads and persists settings from environment variables, .env files or disk."""

    def __init__(
        self,
        credential_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
        dotenv_path: Path | None = None,
    ) -> None:
        self._credential_path = credential_path or Path("credentials/mastodon_config.json")
        self._env = os.environ if env is None else env
        self._dotenv_path = dotenv_path or Path(".env")

    def load_settings(
        self,
        priority: Sequence[str] = ("env", "dotenv", "file"),
    ) -> MastodonSettings:
        """
        Load settings according to the requested priority order.

        Raises:
            ConfigurationError: when no settings are available.
        """

        for source in priority:
            if source == "env":
                settings = self._load_from_env()
            elif source == "dotenv":
                settings = self._load_from_dotenv()
            elif source == "file":
                settings = self._load_from_file()
            else:
                raise ValueError(f"Unknown settings source '{source}'.")

            if settings and not settings.is_empty():
                return settings

        raise ConfigurationError("Mastodon client settings are not configured.")

    def save_settings(self, settings: MastodonSettings) -> None:
        """Persist settings to disk, merging with existing values."""

        existing = self._load_from_file()
        merged = existing.merge(settings) if existing else settings

        self._credential_path.parent.mkdir(parents=True, exist_ok=True)
        with self._credential_path.open("w", encoding="utf-8") as fp:
            json.dump(merged.to_dict(), fp, indent=2, sort_keys=True)

        os.chmod(self._credential_path, 0o600)

    def _load_from_env(self) -> MastodonSettings | None:
        return self._from_env_mapping(self._env)

    def _load_from_dotenv(self) -> MastodonSettings | None:
        if not self._dotenv_path.exists():
            return None
        return self._from_env_mapping(dotenv_values(self._dotenv_path))

    @staticmethod
    def _from_env_mapping(source: Mapping[str, str | None]) -> MastodonSettings | None:
        values = {field: source.get(env_name) for field, env_name in ENV_VAR_MAP.items()}
        settings = MastodonSettings.from_mapping(values)
        return settings if not settings.is_empty() else None

    def _load_from_file(self) -> MastodonSettings | None:
        if not self._credential_path.exists():
            return None

        with self._credential_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Settings file {self._credential_path} did not contain a mapping."
            )

        settings = MastodonSettings.from_mapping(data)
        return settings if not settings.is_empty() else None
