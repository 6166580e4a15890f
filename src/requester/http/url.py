# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers: absolute URL parsing, base + route joining and query merging."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from ..errors import InvalidURL


def parse_url(raw: str) -> httpx.URL:
    """Parse an absolute http(s) URL, raising InvalidURL for anything else."""
    try:
        url = httpx.URL(str(raw))
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURL(f"parse {raw!r}: {exc}") from exc
    if not url.scheme or not url.host:
        raise InvalidURL(f"parse {raw!r}: absolute URL with scheme and host required")
    return url


def lenient_url(raw: str) -> httpx.URL:
    """Parse without validation, falling back to an empty URL on malformed input."""
    try:
        return httpx.URL(str(raw))
    except (httpx.InvalidURL, TypeError, ValueError):
        return httpx.URL("")


def join_url(base: str | None, *routes: str) -> str:
    """
    Join route segments onto ``base`` with "/" as separator.

    Without a base the routes themselves are joined, so the first route is
    expected to be an absolute URL. With a base, duplicate slashes and dot
    segments are cleaned from the resulting path and a trailing slash on the
    last segment is preserved.

    Example:
      join_url("https://host/api", "v1", "items/") -> https://host/api/v1/items/
    """
    if not base:
        return "/".join(routes)
    try:
        parts = urlsplit(base)
    except ValueError as exc:
        raise InvalidURL(f"parse {base!r}: {exc}") from exc
    segments = [parts.path, *routes]
    joined = "/".join(seg.strip("/") for seg in segments if seg.strip("/"))
    path = posixpath.normpath("/" + joined) if joined else ""
    if segments[-1].endswith("/") and not path.endswith("/"):
        path += "/"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def merge_query(url: httpx.URL, query: Mapping[str, Iterable[Any] | Any]) -> httpx.URL:
    """
    Append ``query`` values to the URL's existing query string.

    Repeated keys accumulate, values are stringified and the encoded query is
    sorted by key (values keep their order).
    """
    pairs = parse_qsl(url.query.decode("ascii"), keep_blank_values=True)
    for key, values in query.items():
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = [values]
        pairs.extend((str(key), str(value)) for value in values)
    pairs.sort(key=lambda pair: pair[0])
    return url.copy_with(query=urlencode(pairs).encode("ascii"))


__all__ = ["join_url", "lenient_url", "merge_query", "parse_url"]
