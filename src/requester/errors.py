# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy, the ErrorList aggregate and transport error classification."""

from __future__ import annotations

import socket
import ssl as ssl_module
from collections.abc import Iterable, Iterator
from enum import Enum

import httpx


class RequesterError(Exception):
    """Base class for every failure reported by requester."""


class ConstructionError(RequesterError):
    """A request could not be built; nothing will be sent."""


class InvalidURL(ConstructionError):
    pass


class InvalidMethod(ConstructionError):
    pass


class SerializationError(ConstructionError):
    pass


class BodyIOError(ConstructionError):
    """The request body source could not be drained or encoded."""


class AuthorizationError(ConstructionError):
    """A bearer token provider failed."""


class RequestAlreadySent(ConstructionError):
    pass


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    CANCELLED = "CANCELLED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class TransportError(RequesterError):
    """A send attempt failed below the HTTP layer. Always retryable."""

    def __init__(self, message: str, *, attempt: int | None = None, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.attempt = attempt
        self.category = category


class RequestCancelled(TransportError):
    """The request context was cancelled or its deadline elapsed."""

    def __init__(self, message: str = "request context cancelled", *, attempt: int | None = None):
        super().__init__(message, attempt=attempt, category=ErrorCategory.CANCELLED)


class RetryableStatusError(RequesterError):
    def __init__(self, status_code: int, attempt: int):
        super().__init__(f"received HTTP status code {status_code} in attempt {attempt}")
        self.status_code = status_code
        self.attempt = attempt


class StatusAssertionError(RequesterError):
    """Response status was not one of the expected codes.

    The message is the server supplied body when there is one, otherwise a
    description of the expected and received codes.
    """

    def __init__(self, message: str, *, status_code: int, expected: tuple[int, ...]):
        super().__init__(message)
        self.status_code = status_code
        self.expected = expected


class DeserializationError(RequesterError):
    pass


class ErrorList(RequesterError):
    """Ordered aggregate of failures.

    Nested lists are flattened so ``unwrap()`` always yields the leaf causes in
    the order they happened. ``str()`` joins the cause messages with newlines.
    """

    def __init__(self, errors: Iterable[BaseException | None] = ()):
        self._errors: list[BaseException] = []
        for error in errors:
            self.append(error)
        super().__init__()

    @classmethod
    def join(cls, *errors: BaseException | None) -> ErrorList | None:
        """Aggregate the non-None errors, returning None when there are none."""
        joined = cls(errors)
        return None if joined.empty else joined

    def append(self, error: BaseException | None) -> None:
        if error is None:
            return
        if isinstance(error, ErrorList):
            self._errors.extend(error.unwrap())
        else:
            self._errors.append(error)

    @property
    def empty(self) -> bool:
        return not self._errors

    def unwrap(self) -> list[BaseException]:
        return list(self._errors)

    def first(self, kind: type[BaseException] = BaseException) -> BaseException | None:
        """Return the first cause that is an instance of ``kind``."""
        for error in self._errors:
            if isinstance(error, kind):
                return error
        return None

    def __iter__(self) -> Iterator[BaseException]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __str__(self) -> str:
        return "\n".join(str(error) for error in self._errors)

    def __repr__(self) -> str:
        return f"ErrorList({self._errors!r})"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def transport_error_from_exception(exc: BaseException, attempt: int) -> TransportError:
    """Wrap an exception raised by a transport into a TransportError for ``attempt``."""
    if isinstance(exc, TransportError):
        if exc.attempt is None:
            exc.attempt = attempt
        return exc
    message = str(exc) or exc.__class__.__name__
    error = TransportError(message, attempt=attempt, category=categorize_exception(exc))
    error.__cause__ = exc
    return error


__all__ = [
    "AuthorizationError",
    "BodyIOError",
    "ConstructionError",
    "DeserializationError",
    "ErrorCategory",
    "ErrorList",
    "InvalidMethod",
    "InvalidURL",
    "RequestAlreadySent",
    "RequestCancelled",
    "RequesterError",
    "RetryableStatusError",
    "SerializationError",
    "StatusAssertionError",
    "TransportError",
    "categorize_exception",
    "transport_error_from_exception",
]
