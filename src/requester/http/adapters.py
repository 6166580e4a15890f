# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable HttpClient implementations for tests and offline use."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .client import HttpClient
from .models import PreparedRequest, Response

Outcome = Response | BaseException | Callable[[PreparedRequest], Response]


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient.

    Outcomes are registered per URL and consumed in order; the last outcome for
    a URL repeats once the queue is down to it. An outcome is a Response, an
    exception to raise, or a callable producing a Response.
    """

    def __init__(self, responses: dict[str, Outcome | Iterable[Outcome]] | None = None):
        self._outcomes: dict[str, list[Outcome]] = {}
        self.requests: list[PreparedRequest] = []
        self.closed = False
        for url, outcome in (responses or {}).items():
            self.add(url, outcome)

    def add(self, url: str, outcome: Outcome | Iterable[Outcome]) -> None:
        if isinstance(outcome, (Response, BaseException)) or callable(outcome):
            outcomes = [outcome]
        else:
            outcomes = list(outcome)
        self._outcomes.setdefault(url, []).extend(outcomes)

    def send(self, request: PreparedRequest) -> Response:
        self.requests.append(request)
        queue = self._outcomes.get(request.url)
        if not queue:
            raise ConnectionError(f"no stubbed response configured for {request.url}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, Response):
            return Response(
                status_code=outcome.status_code,
                headers=list(outcome.headers),
                content=outcome.content,
                url=outcome.url or request.url,
            )
        return outcome(request)

    def close(self) -> None:
        self.closed = True
