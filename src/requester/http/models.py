# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response models and the retry policy value object."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import httpx

from ..config import HttpSettings
from ..context import RequestContext, background
from ..errors import (
    ConstructionError,
    ErrorList,
    RequestAlreadySent,
    RequesterError,
)
from .headers import Headers, header_value

if TYPE_CHECKING:
    from .client import HttpClient

MAX_RETRIES = 10


class BackoffPolicy(str, Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry, how long to wait and which statuses count as failures."""

    retries: int = 0
    delay: float = 1.0
    policy: BackoffPolicy = BackoffPolicy.LINEAR
    status_codes: frozenset[int] = frozenset()

    @classmethod
    def create(
        cls,
        retries: int,
        delay: float = 1.0,
        policy: BackoffPolicy | str = BackoffPolicy.LINEAR,
        status_codes: tuple[int, ...] | frozenset[int] = (),
        *,
        max_retries: int = MAX_RETRIES,
    ) -> RetryPolicy:
        """Build a policy with retries clamped to ``[0, max_retries]`` and a non-negative delay."""
        return cls(
            retries=min(max(0, int(retries)), max_retries),
            delay=max(0.0, float(delay)),
            policy=BackoffPolicy(policy),
            status_codes=frozenset(int(code) for code in status_codes),
        )

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> RetryPolicy:
        return cls.create(settings.retries, settings.backoff_delay, settings.backoff_policy)


class RequestStep(Protocol):
    """A configuration step. Raises a RequesterError (and leaves the request untouched) on failure."""

    def apply(self, request: Request) -> None: ...


class ResponseStep(Protocol):
    """An assertion/deserialization step run by Response.handle()."""

    def apply(self, response: Response) -> None: ...


def _run_steps(steps, target) -> ErrorList | None:  # noqa: ANN001
    errors = ErrorList()
    for step in steps:
        try:
            step.apply(target)
        except RequesterError as exc:
            errors.append(exc)
        except Exception as exc:  # noqa: BLE001
            wrapped = RequesterError(f"{type(step).__name__}: {exc}")
            wrapped.__cause__ = exc
            errors.append(wrapped)
    return None if errors.empty else errors


@dataclass(frozen=True)
class PreparedRequest:
    """Immutable snapshot handed to the transport; safe to send repeatedly."""

    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""
    timeout: float | None = None


@dataclass(eq=False)
class Response:
    """Outcome of a (possibly retried) send.

    ``content`` is fully buffered, so every call to ``body()`` returns a fresh
    reader and handler steps can read it any number of times. A placeholder
    with ``status_code == 0`` is returned when nothing was received.
    """

    status_code: int = 0
    headers: Headers = field(default_factory=list)
    content: bytes = b""
    url: str | None = None
    error: ErrorList | None = None
    attempts: int = 0

    @classmethod
    def failed(cls, error: BaseException) -> Response:
        return cls(error=error if isinstance(error, ErrorList) else ErrorList([error]))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def body(self) -> io.BytesIO:
        return io.BytesIO(self.content)

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)

    def handle(self, *steps: ResponseStep) -> ErrorList | None:
        """
        Run response steps in order and return their aggregated errors.

        When the send failed, only steps marked ``runs_on_error`` run and the
        send error comes first in the result.
        """
        if self.error is not None:
            error_steps = [step for step in steps if getattr(step, "runs_on_error", False)]
            if not error_steps:
                return self.error
            return ErrorList.join(self.error, _run_steps(error_steps, self))
        return _run_steps(steps, self)


@dataclass(eq=False)
class Request:
    """A request under construction.

    Built by Client, configured by ``dry()``/``do()`` steps and consumed
    exactly once by ``do()``. Once ``error`` is set, further steps are skipped
    and the recorded error is reported again.
    """

    method: str
    url: httpx.URL
    http_client: HttpClient | None = None
    context: RequestContext = field(default_factory=background)
    headers: Headers = field(default_factory=list)
    body: bytes = b""
    error: ErrorList | None = None
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    timeout: float | None = None
    sent: bool = False

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)

    def dry(self, *steps: RequestStep) -> ErrorList | None:
        """Apply configuration steps without sending."""
        if self.error is not None:
            return self.error
        self.error = _run_steps(steps, self)
        return self.error

    def do(self, *steps: RequestStep) -> Response:
        """Apply configuration steps and send through the retry engine."""
        from .retry import send_with_retries

        if self.sent:
            return Response.failed(RequestAlreadySent(f"{self.method} {self.url} was already sent"))
        error = self.dry(*steps)
        if error is not None:
            return Response.failed(error)
        if self.http_client is None:
            return Response.failed(ConstructionError("no HttpClient configured for request"))
        self.sent = True
        return send_with_retries(self.http_client, self.prepare(), self.retry_policy, self.context)

    def prepare(self) -> PreparedRequest:
        return PreparedRequest(
            method=self.method,
            url=str(self.url),
            headers=tuple(self.headers),
            body=self.body,
            timeout=self.timeout,
        )


__all__ = [
    "MAX_RETRIES",
    "BackoffPolicy",
    "PreparedRequest",
    "Request",
    "RequestStep",
    "Response",
    "ResponseStep",
    "RetryPolicy",
]
