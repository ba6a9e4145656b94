"""
Unit tests for the account service.
"""

from __future__ import annotations

import pytest

from mastodon_client.services.account_service import AccountService
from tests.fakes import FakeDispatcher


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def service(dispatcher: FakeDispatcher) -> AccountService:
    return AccountService(dispatcher)


@pytest.mark.parametrize(
    ("method", "args", "endpoint"),
    [
        ("account", ("3",), "/api/v1/accounts/3"),
        ("verify_credentials", (), "/api/v1/accounts/verify_credentials"),
        ("account_statuses", ("3",), "/api/v1/accounts/3/statuses"),
        ("account_following", ("3",), "/api/v1/accounts/3/following"),
        ("account_followers", (3,), "/api/v1/accounts/3/followers"),
        ("notifications", (), "/api/v1/notifications"),
        ("mutes", (), "/api/v1/mutes"),
        ("blocks", (), "/api/v1/blocks"),
        ("favourites", (), "/api/v1/favourites"),
        ("follow_requests", (), "/api/v1/follow_requests"),
    ],
)
def test_read_endpoints(service: AccountService, dispatcher: FakeDispatcher, method, args, endpoint) -> None:
    getattr(service, method)(*args)

    assert dispatcher.last[:2] == ("GET", endpoint)


@pytest.mark.parametrize(
    ("method", "endpoint"),
    [
        ("account_follow", "/api/v1/accounts/5/follow"),
        ("account_unfollow", "/api/v1/accounts/5/unfollow"),
        ("account_block", "/api/v1/accounts/5/block"),
        ("account_unblock", "/api/v1/accounts/5/unblock"),
        ("account_mute", "/api/v1/accounts/5/mute"),
        ("account_unmute", "/api/v1/accounts/5/unmute"),
        ("follow_request_authorize", "/api/v1/follow_requests/5/authorize"),
        ("follow_request_reject", "/api/v1/follow_requests/5/reject"),
    ],
)
def test_actions_post(service: AccountService, dispatcher: FakeDispatcher, method, endpoint) -> None:
    getattr(service, method)("5")

    assert dispatcher.last[:3] == ("POST", endpoint, {})


def test_account_statuses_passes_paging_options(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.account_statuses("3", max_id="100", limit=40, only_media=None)

    assert dispatcher.last[2] == {"max_id": "100", "limit": 40}


def test_relationships_accepts_single_id(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.account_relationships(3)

    assert dispatcher.last[:3] == ("GET", "/api/v1/accounts/relationships", {"id[]": ["3"]})


def test_relationships_accepts_many_ids(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.account_relationships(["1", 2])

    assert dispatcher.last[2] == {"id[]": ["1", "2"]}


def test_account_search_sends_query(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.account_search("gargron", limit=5)

    assert dispatcher.last[:3] == ("GET", "/api/v1/accounts/search", {"q": "gargron", "limit": 5})


def test_content_search_sends_query(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.content_search("#python", resolve=True)

    assert dispatcher.last[:3] == ("GET", "/api/v1/search", {"q": "#python", "resolve": True})


def test_notifications_rekeys_excluded_types(service: AccountService, dispatcher: FakeDispatcher) -> None:
    service.notifications(exclude_types=["follow", "favourite"])

    assert dispatcher.last[2] == {"exclude_types[]": ["follow", "favourite"]}
