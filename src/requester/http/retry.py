# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry engine: sends a prepared request with bounded linear/exponential backoff."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..config import load_http_settings
from ..context import RequestContext, background
from ..errors import ErrorList, RequestCancelled, RetryableStatusError, transport_error_from_exception
from .client import HttpClient
from .models import BackoffPolicy, PreparedRequest, Response, RetryPolicy

logger = logging.getLogger(__name__)

# Attempts are 1-indexed; also the minimum number of sends.
FIRST_ATTEMPT = 1


def build_default_retry_policy() -> RetryPolicy:
    """Create a RetryPolicy from environment-backed HttpSettings."""
    return RetryPolicy.from_settings(load_http_settings())


def backoff_delay(policy: BackoffPolicy, delay: float, attempt: int) -> float:
    """Seconds to wait after failed ``attempt``: ``delay * n`` or ``delay * n**2``."""
    if attempt < FIRST_ATTEMPT or delay <= 0:
        return 0.0
    if policy is BackoffPolicy.EXPONENTIAL:
        return delay * attempt * attempt
    return delay * attempt


def _bounded(request: PreparedRequest, context: RequestContext) -> PreparedRequest:
    """Cap the transport timeout by the time left on the context."""
    remaining = context.remaining()
    if remaining is None:
        return request
    timeout = remaining if request.timeout is None else min(request.timeout, remaining)
    return replace(request, timeout=timeout)


def _cancelled(context: RequestContext, attempt: int) -> RequestCancelled:
    return RequestCancelled(context.reason or "context canceled", attempt=attempt)


def send_with_retries(
    client: HttpClient,
    request: PreparedRequest,
    policy: RetryPolicy | None = None,
    context: RequestContext | None = None,
) -> Response:
    """
    Send ``request`` until it succeeds or the retry budget is spent.

    ``policy.retries`` is the total number of sends (at least one). Backoff
    only happens between sends, so the final failure returns immediately.

    Transport exceptions and responses whose status is in
    ``policy.status_codes`` are failed attempts; any other response ends the
    loop, whatever its status. The returned response is the last one received
    (a status 0 placeholder if none was) and its ``error`` lists every failed
    attempt in order, including those preceding a final success.
    """
    policy = policy or build_default_retry_policy()
    context = context or background()
    max_attempts = max(FIRST_ATTEMPT, policy.retries)

    errors = ErrorList()
    last: Response | None = None
    sends = 0
    attempt = 0

    while True:
        attempt += 1
        if context.cancelled:
            errors.append(_cancelled(context, attempt))
            break

        logger.debug("%s %s (attempt %d/%d)", request.method, request.url, attempt, max_attempts)
        sends += 1
        try:
            response = client.send(_bounded(request, context))
        except Exception as exc:  # noqa: BLE001
            error = transport_error_from_exception(exc, attempt)
        else:
            last = response
            if response.status_code not in policy.status_codes:
                break
            error = RetryableStatusError(response.status_code, attempt)

        errors.append(error)
        if attempt >= max_attempts:
            logger.warning("%s %s failed after %d attempt(s): %s", request.method, request.url, attempt, error)
            break
        if context.cancelled:
            break

        wait = backoff_delay(policy.policy, policy.delay, attempt)
        logger.warning(
            "%s %s attempt %d/%d failed: %s. Retrying in %.3fs",
            request.method,
            request.url,
            attempt,
            max_attempts,
            error,
            wait,
        )
        if not context.wait(wait):
            errors.append(_cancelled(context, attempt + 1))
            break

    result = last if last is not None else Response()
    result.error = ErrorList.join(errors)
    result.attempts = sends
    return result


__all__ = ["FIRST_ATTEMPT", "backoff_delay", "build_default_retry_policy", "send_with_retries"]
