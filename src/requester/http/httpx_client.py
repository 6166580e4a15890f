# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging

import httpx

from ..config import HttpSettings, load_http_settings
from .client import HttpClient
from .headers import normalize_headers
from .models import PreparedRequest, Response

logger = logging.getLogger(__name__)


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper.

    Bodies are streamed into memory up to ``settings.max_body_bytes``; anything
    beyond the cap is dropped with a warning. Transport exceptions propagate to
    the retry engine.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def send(self, request: PreparedRequest) -> Response:
        headers = httpx.Headers(list(request.headers))
        if "user-agent" not in headers:
            headers["User-Agent"] = self.settings.user_agent

        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        max_body_bytes = self.settings.max_body_bytes

        outbound = self._client.build_request(
            request.method,
            request.url,
            headers=headers,
            content=request.body or None,
            timeout=timeout,
        )
        resp = self._client.send(outbound, stream=True)
        try:
            content = bytearray()
            for chunk in resp.iter_bytes():
                if not chunk:
                    continue
                remaining = max_body_bytes - len(content)
                if len(chunk) > remaining:
                    content.extend(chunk[:remaining])
                    logger.warning("Response body from %s truncated at %d bytes", request.url, max_body_bytes)
                    break
                content.extend(chunk)
        finally:
            resp.close()

        return Response(
            status_code=resp.status_code,
            headers=normalize_headers(resp.headers),
            content=bytes(content),
            url=str(resp.url),
        )

    def close(self) -> None:
        self._client.close()
