# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Multi-valued header helpers.

Headers are kept as an ordered list of ``(name, value)`` pairs so repeated
fields survive (``add_header`` appends, it never replaces). Lookups are
case-insensitive (RFC 9110).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

Headers = list[tuple[str, str]]


def normalize_headers(headers: Any) -> Headers:
    """
    Best-effort coercion of header containers into a list of string pairs.

    Accepts:
    - httpx.Headers (repeated fields preserved via ``multi_items()``)
    - plain mappings, whose values may be lists for repeated fields
    - iterable-of-pairs (e.g. list[tuple[str, str]])
    """
    if not headers:
        return []
    multi_items = getattr(headers, "multi_items", None)
    if callable(multi_items):
        return [(str(k), str(v)) for k, v in multi_items()]
    if isinstance(headers, Mapping):
        out: Headers = []
        for key, value in headers.items():
            if key is None:
                continue
            values = value if isinstance(value, (list, tuple)) else [value]
            out.extend((str(key), "" if item is None else str(item)) for item in values)
        return out
    return [(str(k), "" if v is None else str(v)) for k, v in headers]


def add_header(headers: Headers, name: str, value: Any) -> None:
    headers.append((name, str(value)))


def set_header(headers: Headers, name: str, value: Any) -> None:
    """Replace every occurrence of ``name`` with a single value."""
    remove_header(headers, name)
    headers.append((name, str(value)))


def remove_header(headers: Headers, name: str) -> None:
    lower = name.lower()
    headers[:] = [(k, v) for k, v in headers if k.lower() != lower]


def header_values(headers: Headers | None, name: str) -> list[str]:
    if not headers or not name:
        return []
    lower = name.lower()
    return [value for key, value in headers if key.lower() == lower]


def header_value(headers: Headers | None, name: str, default: str = "") -> str:
    """Return the first value for ``name`` using case-insensitive matching."""
    values = header_values(headers, name)
    return values[0].strip() if values else default


__all__ = [
    "Headers",
    "add_header",
    "header_value",
    "header_values",
    "normalize_headers",
    "remove_header",
    "set_header",
]
