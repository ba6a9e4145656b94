from __future__ import annotations

import stat
from email.utils import formatdate
from pathlib import Path

import pytest

from mastodon_client.config import LiteralValue, MastodonSettings, StoredValue, credential_source
from mastodon_client.exceptions import ConfigurationError, MissingCredentialError
from mastodon_client.rate_limit import RateLimitPolicy
from mastodon_client.session import ClientSession
from tests.fakes import FakeClock


def test_client_credentials_are_loaded_from_file(tmp_path: Path) -> None:
    credential_file = tmp_path / "clientcred.txt"
    credential_file.write_text("ID123\nSECRET456\n", encoding="utf-8")

    session = ClientSession(str(credential_file))

    assert session.client_id == "ID123"
    assert session.client_secret == "SECRET456"


def test_literal_client_id_requires_secret() -> None:
    with pytest.raises(MissingCredentialError):
        ClientSession("not-a-file-id")


def test_missing_client_id_is_rejected() -> None:
    with pytest.raises(MissingCredentialError):
        ClientSession(None, "secret")


def test_incomplete_credential_file_is_rejected(tmp_path: Path) -> None:
    credential_file = tmp_path / "clientcred.txt"
    credential_file.write_text("ONLY-ID\n", encoding="utf-8")

    with pytest.raises(MissingCredentialError):
        ClientSession(credential_file)


def test_access_token_is_loaded_from_file(tmp_path: Path) -> None:
    token_file = tmp_path / "usercred.txt"
    token_file.write_text("TOKEN789\nignored\n", encoding="utf-8")

    session = ClientSession("id", "secret", str(token_file))

    assert session.access_token == "TOKEN789"


def test_literal_access_token_is_used_as_is() -> None:
    session = ClientSession("id", "secret", "plain-token")

    assert session.access_token == "plain-token"


def test_defaults() -> None:
    clock = FakeClock()

    session = ClientSession("id", "secret", clock=clock)

    assert session.api_base_url == "https://mastodon.social"
    assert session.ratelimit_method is RateLimitPolicy.BLOCK_AND_RETRY
    assert session.pace_factor == pytest.approx(1.1)
    assert session.request_timeout == 300
    assert session.ratelimit.limit == 150
    assert session.ratelimit.remaining == 150
    assert session.ratelimit.reset_at == clock.now
    assert session.access_token is None
    assert session.token_expired is False


def test_invalid_ratelimit_method_rejects_construction() -> None:
    with pytest.raises(ConfigurationError):
        ClientSession("id", "secret", ratelimit_method="whenever")


@pytest.mark.parametrize("option", ["ratelimit_pacefactor", "request_timeout"])
def test_non_positive_numbers_reject_construction(option: str) -> None:
    with pytest.raises(ConfigurationError):
        ClientSession("id", "secret", **{option: 0})


def test_ratelimit_method_is_read_only() -> None:
    session = ClientSession("id", "secret", ratelimit_method="pace")

    with pytest.raises(AttributeError):
        session.ratelimit_method = RateLimitPolicy.FAIL_FAST  # type: ignore[misc]


def test_trailing_slash_is_removed_from_base_url() -> None:
    session = ClientSession("id", "secret", api_base_url="https://example.social/")

    assert session.api_base_url == "https://example.social"


def test_persisted_credentials_round_trip_through_constructor(tmp_path: Path) -> None:
    session = ClientSession("ID123", "SECRET456", "TOKEN789")
    client_file = tmp_path / "secrets" / "clientcred.txt"
    token_file = tmp_path / "secrets" / "usercred.txt"

    session.persist_client_credential(client_file)
    session.persist_token(token_file)

    assert client_file.read_text(encoding="utf-8") == "ID123\nSECRET456\n"
    assert token_file.read_text(encoding="utf-8") == "TOKEN789\n"
    assert stat.S_IMODE(token_file.stat().st_mode) == 0o600

    restored = ClientSession(client_file, access_token=token_file)
    assert (restored.client_id, restored.client_secret, restored.access_token) == (
        "ID123",
        "SECRET456",
        "TOKEN789",
    )


def test_persist_token_without_token_fails(tmp_path: Path) -> None:
    session = ClientSession("id", "secret")

    with pytest.raises(MissingCredentialError):
        session.persist_token(tmp_path / "usercred.txt")
    assert not (tmp_path / "usercred.txt").exists()


def test_token_expiry_follows_clock() -> None:
    clock = FakeClock()
    session = ClientSession("id", "secret", clock=clock)

    session.set_token_expiry(60)
    assert session.token_expired is False

    clock.now += 61
    assert session.token_expired is True


def test_update_from_response_headers_uses_session_clock() -> None:
    clock = FakeClock()
    session = ClientSession("id", "secret", clock=clock)

    session.update_from_response_headers(
        {
            "X-RateLimit-Limit": "300",
            "X-RateLimit-Remaining": "7",
            "X-RateLimit-Reset": str(clock.now + 20 + 120),
            "Date": formatdate(clock.now + 20, usegmt=True),
        }
    )

    assert session.ratelimit.remaining == 7
    assert session.ratelimit.reset_at == pytest.approx(clock.now + 120)


def test_from_settings_converts_strings() -> None:
    settings = MastodonSettings(
        api_base_url="https://example.social",
        client_id="id",
        client_secret="secret",
        access_token="token",
        ratelimit_method="pace",
        ratelimit_pacefactor="2.5",
        request_timeout="30",
    )

    session = ClientSession.from_settings(settings)

    assert session.api_base_url == "https://example.social"
    assert session.ratelimit_method is RateLimitPolicy.PACE
    assert session.pace_factor == 2.5
    assert session.request_timeout == 30.0
    assert session.access_token == "token"


def test_from_settings_rejects_non_numeric_values() -> None:
    settings = MastodonSettings(client_id="id", client_secret="secret", request_timeout="forever")

    with pytest.raises(ConfigurationError):
        ClientSession.from_settings(settings)


def test_credential_source_classifies_values(tmp_path: Path) -> None:
    existing = tmp_path / "clientcred.txt"
    existing.write_text("a\nb\n", encoding="utf-8")

    assert credential_source(str(existing)) == StoredValue(existing)
    assert credential_source(existing) == StoredValue(existing)
    assert credential_source("abc123") == LiteralValue("abc123")
    assert credential_source(None) is None


class _FailingWriter:
    """Context manager around a real handle whose writes always fail."""

    def __init__(self, handle) -> None:  # type: ignore[no-untyped-def]
        self.handle = handle

    def __enter__(self) -> "_FailingWriter":
        return self

    def __exit__(self, *exc_info) -> None:  # type: ignore[no-untyped-def]
        self.handle.close()

    def write(self, text: str) -> int:
        raise OSError(28, "No space left on device")


@pytest.mark.parametrize("persist", ["persist_token", "persist_client_credential"])
def test_failed_write_propagates_and_closes_the_file(
    persist: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    session = ClientSession("ID123", "SECRET456", "TOKEN789")
    handles = []
    real_open = Path.open

    def failing_open(self, *args, **kwargs):  # type: ignore[no-untyped-def]
        handle = real_open(self, *args, **kwargs)
        handles.append(handle)
        return _FailingWriter(handle)

    monkeypatch.setattr(Path, "open", failing_open)

    with pytest.raises(OSError, match="No space left"):
        getattr(session, persist)(tmp_path / "cred.txt")

    assert len(handles) == 1
    assert handles[0].closed
