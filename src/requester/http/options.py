# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request configuration steps.

Every ``with_*`` factory returns a step object whose ``apply(request)``
either mutates the request or raises a ConstructionError subclass without
touching it. Steps are passed to ``Request.dry()`` / ``Request.do()``, which
aggregate their errors.
"""

from __future__ import annotations

import base64
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .. import codecs
from ..context import RequestContext
from ..errors import AuthorizationError, BodyIOError, ConstructionError
from .headers import add_header, set_header
from .models import BackoffPolicy, Request, RequestStep, RetryPolicy, _run_steps
from .url import merge_query, parse_url

TokenProvider = Callable[[RequestContext], str]


def _set_body(request: Request, body: bytes, content_type: str | None = None) -> None:
    request.body = body
    set_header(request.headers, "Content-Length", len(body))
    if content_type:
        set_header(request.headers, "Content-Type", content_type)


@dataclass(frozen=True)
class URLStep:
    raw: str

    def apply(self, request: Request) -> None:
        request.url = parse_url(self.raw)


@dataclass(frozen=True)
class QueryStep:
    query: Mapping[str, Iterable[Any] | Any]

    def apply(self, request: Request) -> None:
        request.url = merge_query(request.url, self.query)


@dataclass(frozen=True)
class BodyStep:
    source: Any

    def apply(self, request: Request) -> None:
        _set_body(request, codecs.drain(self.source))


@dataclass(frozen=True)
class JSONBodyStep:
    obj: Any

    def apply(self, request: Request) -> None:
        _set_body(request, codecs.encode_json(self.obj), codecs.JSON_CONTENT_TYPE)


@dataclass(frozen=True)
class XMLBodyStep:
    obj: Any
    root: str | None = None

    def apply(self, request: Request) -> None:
        _set_body(request, codecs.encode_xml(self.obj, self.root), codecs.XML_CONTENT_TYPE)


@dataclass(frozen=True)
class FormURLEncodedStep:
    form: Mapping[str, Iterable[str] | str]

    def apply(self, request: Request) -> None:
        body, content_type = codecs.encode_form_urlencoded(self.form)
        _set_body(request, body, content_type)


@dataclass(frozen=True)
class FormDataStep:
    form: Mapping[str, bytes | str]

    def apply(self, request: Request) -> None:
        body, content_type = codecs.encode_multipart(self.form)
        _set_body(request, body, content_type)


@dataclass(frozen=True)
class FormDataFileStep:
    path: str | Path
    field: str
    transforms: tuple[Callable[[bytes], bytes], ...] = ()

    def apply(self, request: Request) -> None:
        try:
            content = Path(self.path).read_bytes()
        except OSError as exc:
            raise BodyIOError(f"open {self.path}: {exc.strerror or exc}") from exc
        for transform in self.transforms:
            content = transform(content)
        FormDataStep({self.field: content}).apply(request)


@dataclass(frozen=True)
class BasicAuthStep:
    username: str
    password: str

    def apply(self, request: Request) -> None:
        credentials = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        set_header(request.headers, "Authorization", f"Basic {credentials}")


@dataclass(frozen=True)
class BearerAuthStep:
    provider: TokenProvider

    def apply(self, request: Request) -> None:
        try:
            token = self.provider(request.context)
        except Exception as exc:  # noqa: BLE001
            raise AuthorizationError(str(exc) or type(exc).__name__) from exc
        set_header(request.headers, "Authorization", f"Bearer {token}")


@dataclass(frozen=True)
class HeaderStep:
    name: str
    value: Any

    def apply(self, request: Request) -> None:
        add_header(request.headers, self.name, self.value)


@dataclass(frozen=True)
class RetryPolicyStep:
    retries: int
    delay: float = 1.0
    policy: BackoffPolicy | str = BackoffPolicy.LINEAR
    status_codes: tuple[int, ...] = ()

    def apply(self, request: Request) -> None:
        try:
            retry_policy = RetryPolicy.create(self.retries, self.delay, self.policy, self.status_codes)
        except (TypeError, ValueError) as exc:
            raise ConstructionError(f"retry policy: {exc}") from exc
        request.retry_policy = retry_policy


@dataclass(frozen=True)
class TimeoutStep:
    seconds: float | None

    def apply(self, request: Request) -> None:
        request.timeout = self.seconds if self.seconds and self.seconds > 0 else None


@dataclass(frozen=True)
class StepGroup:
    steps: tuple[RequestStep, ...]

    def apply(self, request: Request) -> None:
        errors = _run_steps(self.steps, request)
        if errors is not None:
            raise errors


def with_url(raw: str) -> URLStep:
    return URLStep(raw)


def with_url_query(query: Mapping[str, Iterable[Any] | Any]) -> QueryStep:
    return QueryStep(query)


def with_body(source: Any) -> BodyStep:
    return BodyStep(source)


def with_body_json(obj: Any) -> JSONBodyStep:
    return JSONBodyStep(obj)


def with_body_xml(obj: Any, root: str | None = None) -> XMLBodyStep:
    return XMLBodyStep(obj, root)


def with_body_form_urlencoded(form: Mapping[str, Iterable[str] | str]) -> FormURLEncodedStep:
    return FormURLEncodedStep(form)


def with_body_form_data(form: Mapping[str, bytes | str]) -> FormDataStep:
    return FormDataStep(form)


def with_body_form_data_file(path: str | Path, field: str, *transforms: Callable[[bytes], bytes]) -> FormDataFileStep:
    return FormDataFileStep(path, field, transforms)


def with_authorization_basic(username: str, password: str) -> BasicAuthStep:
    return BasicAuthStep(username, password)


def with_authorization_bearer(provider: TokenProvider) -> BearerAuthStep:
    return BearerAuthStep(provider)


def with_header(name: str, value: Any) -> HeaderStep:
    return HeaderStep(name, value)


def with_retry_policy(
    retries: int,
    delay: float = 1.0,
    policy: BackoffPolicy | str = BackoffPolicy.LINEAR,
    *status_codes: int,
) -> RetryPolicyStep:
    """Send at most ``retries`` times in total (clamped to 0..10, always at least once)."""
    return RetryPolicyStep(retries, delay, policy, tuple(status_codes))


def with_timeout(seconds: float | None) -> TimeoutStep:
    return TimeoutStep(seconds)


def with_request_options(*steps: RequestStep) -> StepGroup:
    return StepGroup(tuple(steps))


__all__ = [
    "TokenProvider",
    "with_authorization_basic",
    "with_authorization_bearer",
    "with_body",
    "with_body_form_data",
    "with_body_form_data_file",
    "with_body_form_urlencoded",
    "with_body_json",
    "with_body_xml",
    "with_header",
    "with_request_options",
    "with_retry_policy",
    "with_timeout",
    "with_url",
    "with_url_query",
]
