from __future__ import annotations

import string

from mastodon_client.encoding import form_decode, form_encode, generate_params


def test_space_encodes_to_plus() -> None:
    assert form_encode([("name", "a b")]) == "name=a+b"


def test_reserved_characters_are_percent_encoded() -> None:
    assert form_encode([("value", "a&b")]) == "value=a%26b"
    assert form_encode([("q", "x=y?z/#")]) == "q=x%3Dy%3Fz%2F%23"


def test_ordered_pairs_keep_their_order() -> None:
    body = form_encode([("b", "2"), ("a", "1"), ("c", "3")])

    assert body == "b=2&a=1&c=3"


def test_mapping_input_contains_every_field() -> None:
    body = form_encode({"status": "hello world", "visibility": "public"})

    assert sorted(body.split("&")) == ["status=hello+world", "visibility=public"]


def test_none_values_are_skipped_and_booleans_lowercased() -> None:
    body = form_encode([("sensitive", True), ("local", False), ("spoiler_text", None)])

    assert body == "sensitive=true&local=false"


def test_repeated_field_is_emitted_once_per_element() -> None:
    body = form_encode({"media_ids[]": ["1", "2"]})

    assert body == "media_ids%5B%5D=1&media_ids%5B%5D=2"
    assert form_decode(body) == [("media_ids[]", "1"), ("media_ids[]", "2")]


def test_decode_reverses_encode_for_printable_ascii() -> None:
    printable = string.printable.strip()
    pairs = [
        ("status", printable),
        ("spoiler text", "CW: a & b + c"),
        ("empty", ""),
        ("percent", "100%"),
    ]

    assert form_decode(form_encode(pairs)) == pairs


def test_generate_params_drops_excluded_keys() -> None:
    options = {"username": "u", "password": "p", "code": "c", "scopes": ["read"]}

    params = generate_params(options, ("code", "scopes"))

    assert params == {"username": "u", "password": "p"}


def test_generate_params_rekeys_sequences() -> None:
    params = generate_params({"id": ["1", "2"], "exclude_types": ("follow",), "limit": 20})

    assert params == {"id[]": ["1", "2"], "exclude_types[]": ["follow"], "limit": 20}


def test_generate_params_does_not_mutate_input() -> None:
    options = {"q": "cats", "ids": [1, 2], "resolve": None}
    snapshot = {"q": "cats", "ids": [1, 2], "resolve": None}

    params = generate_params(options, ("q",))

    assert options == snapshot
    assert params == {"ids[]": [1, 2]}
