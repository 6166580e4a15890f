# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport protocol and factory."""

from typing import Protocol

from ..config import HttpSettings, load_http_settings
from .models import PreparedRequest, Response


class HttpClient(Protocol):
    """Sends one prepared request.

    Implementations return the received response (any status) and raise on
    transport failure. They must be safe to call repeatedly with the same
    prepared request and from concurrent, independent requests.
    """

    def send(self, request: PreparedRequest) -> Response: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """Factory for the default httpx-backed client."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_http_settings())
