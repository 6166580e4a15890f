# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .handlers import (
    with_body_unmarshal,
    with_error_body,
    with_status_code_assertion,
    with_unmarshal_json,
    with_unmarshal_xml,
)
from .headers import Headers, header_value, header_values, normalize_headers
from .httpx_client import HttpxClient
from .models import MAX_RETRIES, BackoffPolicy, PreparedRequest, Request, Response, RetryPolicy
from .options import (
    with_authorization_basic,
    with_authorization_bearer,
    with_body,
    with_body_form_data,
    with_body_form_data_file,
    with_body_form_urlencoded,
    with_body_json,
    with_body_xml,
    with_header,
    with_request_options,
    with_retry_policy,
    with_timeout,
    with_url,
    with_url_query,
)
from .retry import FIRST_ATTEMPT, backoff_delay, build_default_retry_policy, send_with_retries
from .url import join_url, merge_query, parse_url

__all__ = [
    "FIRST_ATTEMPT",
    "MAX_RETRIES",
    "BackoffPolicy",
    "Headers",
    "HttpClient",
    "HttpxClient",
    "PreparedRequest",
    "Request",
    "Response",
    "RetryPolicy",
    "StubHttpClient",
    "backoff_delay",
    "build_default_retry_policy",
    "create_default_http_client",
    "header_value",
    "header_values",
    "join_url",
    "merge_query",
    "normalize_headers",
    "parse_url",
    "send_with_retries",
    "with_authorization_basic",
    "with_authorization_bearer",
    "with_body",
    "with_body_form_data",
    "with_body_form_data_file",
    "with_body_form_urlencoded",
    "with_body_json",
    "with_body_unmarshal",
    "with_body_xml",
    "with_error_body",
    "with_header",
    "with_request_options",
    "with_retry_policy",
    "with_status_code_assertion",
    "with_timeout",
    "with_unmarshal_json",
    "with_unmarshal_xml",
    "with_url",
    "with_url_query",
]
