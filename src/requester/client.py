# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client: holds the transport and base URL and hands out Request builders."""

from __future__ import annotations

import logging
import re
from contextlib import suppress

from .config import HttpSettings, load_http_settings
from .context import RequestContext, background
from .errors import ErrorList, InvalidMethod, InvalidURL
from .http.client import HttpClient, create_default_http_client
from .http.models import Request, RetryPolicy
from .http.url import join_url, lenient_url, parse_url

logger = logging.getLogger(__name__)

# RFC 9110 token characters
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class Client:
    """
    Factory for requests sharing one transport and an optional base URL.

    With a base URL, routes are path segments appended to it; without one the
    routes are joined with "/" and the first is expected to be a full URL.
    Requests inherit the retry policy configured in HttpSettings.
    """

    def __init__(
        self,
        base_url: str | None = None,
        http_client: HttpClient | None = None,
        settings: HttpSettings | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.base_url = self.settings.base_url if base_url is None else base_url
        self.http_client = http_client or create_default_http_client(self.settings)

    def request(self, method: str, *routes: str, context: RequestContext | None = None) -> Request:
        """
        Create a request for ``method`` and the joined routes.

        Raises InvalidMethod for a method that is not an HTTP token. URL
        problems do not raise: they are recorded on ``request.error`` and the
        request will never be sent.
        """
        method = method or "GET"
        if not _METHOD_RE.match(method):
            raise InvalidMethod(f"invalid HTTP method {method!r}")

        raw = ""
        error: InvalidURL | None = None
        try:
            raw = join_url(self.base_url, *routes)
            parse_url(raw)
        except InvalidURL as exc:
            logger.debug("Request URL rejected: %s", exc)
            error = exc

        return Request(
            method=method,
            url=lenient_url(raw),
            http_client=self.http_client,
            context=context or background(),
            error=ErrorList.join(error),
            retry_policy=RetryPolicy.from_settings(self.settings),
        )

    def get(self, *routes: str, context: RequestContext | None = None) -> Request:
        return self.request("GET", *routes, context=context)

    def post(self, *routes: str, context: RequestContext | None = None) -> Request:
        return self.request("POST", *routes, context=context)

    def put(self, *routes: str, context: RequestContext | None = None) -> Request:
        return self.request("PUT", *routes, context=context)

    def patch(self, *routes: str, context: RequestContext | None = None) -> Request:
        return self.request("PATCH", *routes, context=context)

    def delete(self, *routes: str, context: RequestContext | None = None) -> Request:
        return self.request("DELETE", *routes, context=context)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["Client"]
