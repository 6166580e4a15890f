# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response steps for ``Response.handle()``: status assertions and body decoding."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .. import codecs
from ..errors import DeserializationError, StatusAssertionError
from .models import Response


def format_status_codes(codes: tuple[int, ...]) -> str:
    return "[" + " ".join(str(code) for code in codes) + "]"


@dataclass(frozen=True)
class StatusCodeAssertion:
    status_codes: tuple[int, ...]

    def apply(self, response: Response) -> None:
        if response.status_code in self.status_codes:
            return
        # A non-empty body is taken as the server's own error message.
        body = response.body().read()
        if body:
            raise StatusAssertionError(
                body.decode("utf-8", errors="replace"),
                status_code=response.status_code,
                expected=self.status_codes,
            )
        raise StatusAssertionError(
            f"expected status code(s) '{format_status_codes(self.status_codes)}', received '{response.status_code}'",
            status_code=response.status_code,
            expected=self.status_codes,
        )


@dataclass(frozen=True)
class BodyUnmarshal:
    """Decode the body into ``target`` when the status is allowed (any status if none listed)."""

    target: Any
    decoder: codecs.Decoder
    status_codes: tuple[int, ...] = ()

    def apply(self, response: Response) -> None:
        if self.status_codes and response.status_code not in self.status_codes:
            return
        body = response.body().read()
        if not body:
            return
        try:
            codecs.assign(self.target, self.decoder(body))
        except Exception as exc:  # noqa: BLE001
            raise DeserializationError(f"decode {response.status_code} response body: {exc}") from exc


@dataclass(frozen=True)
class ErrorBody:
    """Hand the last received body to ``sink`` even when the send failed."""

    sink: Callable[[bytes], Any]
    runs_on_error = True

    def apply(self, response: Response) -> None:
        if response.status_code:
            self.sink(response.body().read())


def with_status_code_assertion(*status_codes: int) -> StatusCodeAssertion:
    return StatusCodeAssertion(tuple(status_codes))


def with_body_unmarshal(target: Any, decoder: codecs.Decoder, *status_codes: int) -> BodyUnmarshal:
    return BodyUnmarshal(target, decoder, tuple(status_codes))


def with_unmarshal_json(target: Any, *status_codes: int) -> BodyUnmarshal:
    return BodyUnmarshal(target, codecs.decode_json, tuple(status_codes))


def with_unmarshal_xml(target: Any, *status_codes: int) -> BodyUnmarshal:
    return BodyUnmarshal(target, codecs.decode_xml, tuple(status_codes))


def with_error_body(sink: Callable[[bytes], Any]) -> ErrorBody:
    return ErrorBody(sink)


__all__ = [
    "format_status_codes",
    "with_body_unmarshal",
    "with_error_body",
    "with_status_code_assertion",
    "with_unmarshal_json",
    "with_unmarshal_xml",
]
