"""
Form encoding and parameter projection helpers.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence
from urllib.parse import parse_qsl, quote_plus

REPEATED_SUFFIX = "[]"

FormInput = Mapping[str, Any] | Sequence[tuple[str, Any]]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _iter_pairs(form: FormInput) -> Iterable[tuple[str, Any]]:
    if isinstance(form, Mapping):
        return form.items()
    return form


def form_encode(form: FormInput) -> str:
    """
    Serialize ``form`` as ``application/x-www-form-urlencoded``.

    ``form`` is either a mapping (no ordering guarantee) or an ordered
    sequence of ``(name, value)`` pairs. Spaces become ``+``; every other
    reserved character is percent-encoded. Values under a ``name[]`` key
    that are lists are emitted once per element.
    """

    fields: list[str] = []
    for name, value in _iter_pairs(form):
        if value is None:
            continue
        if name.endswith(REPEATED_SUFFIX) and isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
        else:
            values = [value]
        encoded_name = quote_plus(str(name), safe="")
        for item in values:
            fields.append(f"{encoded_name}={quote_plus(_format_value(item), safe='')}")
    return "&".join(fields)


def form_decode(body: str) -> list[tuple[str, str]]:
    """Inverse of :func:`form_encode` for ordered pairs."""

    return parse_qsl(body, keep_blank_values=True)


def generate_params(options: Mapping[str, Any], exclude: Iterable[str] = ()) -> dict[str, Any]:
    """
    Project caller-facing ``options`` onto wire parameters.

    Excluded keys and ``None`` values are dropped. Sequence values are rekeyed
    as ``name[]`` so the form encoder repeats the field. ``options`` is left
    untouched.
    """

    excluded = set(exclude)
    params: dict[str, Any] = {}
    for key, value in options.items():
        if key in excluded or value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            params[f"{key}{REPEATED_SUFFIX}"] = list(value)
        else:
            params[key] = value
    return params
