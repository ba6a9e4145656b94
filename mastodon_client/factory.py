"""
Factory for creating Mastodon client instances with proper initialization.
"""

from __future__ import annotations

from typing import Any

from mastodon_client.client import Mastodon
from mastodon_client.config import ConfigManager, MastodonSettings
from mastodon_client.exceptions import MissingCredentialError
from mastodon_client.session import ClientSession


class MastodonClientFactory:
    """Factory for creating properly initialized Mastodon API clients."""

    @staticmethod
    def create_from_config(config_manager: ConfigManager, **overrides: Any) -> Mastodon:
        """
        Create a Mastodon client from settings found by ``config_manager``.

        Args:
            config_manager: ConfigManager used to locate settings
            **overrides: ClientSession options taking precedence over the settings,
                plus ``transport`` and ``sleep`` for the dispatcher

        Raises:
            ConfigurationError: If settings are missing or invalid
        """
        settings = config_manager.load_settings()
        return MastodonClientFactory.create_from_settings(settings, **overrides)

    @staticmethod
    def create_from_settings(settings: MastodonSettings, **overrides: Any) -> Mastodon:
        """
        Create a Mastodon client directly from settings.

        Raises:
            MissingCredentialError: If no client id is configured
        """
        if not settings.client_id and "client_id" not in overrides:
            raise MissingCredentialError("A client id (or client credential file) is required")

        wiring = {key: overrides.pop(key) for key in ("transport", "sleep") if key in overrides}
        session = ClientSession.from_settings(settings, **overrides)
        return Mastodon.from_session(session, **wiring)
