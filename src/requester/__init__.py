# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
requester package entrypoint.

A fluent layer over httpx: a Client hands out Request builders, configuration
steps shape the request, a bounded retry engine sends it and response steps
assert on and decode the result. Failures at every phase are returned as
ErrorList values rather than raised.
"""

from .client import Client
from .config import HttpSettings, load_http_settings
from .context import RequestContext, background, timeout_context
from .errors import (
    AuthorizationError,
    BodyIOError,
    ConstructionError,
    DeserializationError,
    ErrorCategory,
    ErrorList,
    InvalidMethod,
    InvalidURL,
    RequestAlreadySent,
    RequestCancelled,
    RequesterError,
    RetryableStatusError,
    SerializationError,
    StatusAssertionError,
    TransportError,
)
from .http import (
    MAX_RETRIES,
    BackoffPolicy,
    HttpClient,
    HttpxClient,
    PreparedRequest,
    Request,
    Response,
    RetryPolicy,
    StubHttpClient,
    create_default_http_client,
    send_with_retries,
    with_authorization_basic,
    with_authorization_bearer,
    with_body,
    with_body_form_data,
    with_body_form_data_file,
    with_body_form_urlencoded,
    with_body_json,
    with_body_unmarshal,
    with_body_xml,
    with_error_body,
    with_header,
    with_request_options,
    with_retry_policy,
    with_status_code_assertion,
    with_timeout,
    with_unmarshal_json,
    with_unmarshal_xml,
    with_url,
    with_url_query,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "MAX_RETRIES",
    "AuthorizationError",
    "BackoffPolicy",
    "BodyIOError",
    "Client",
    "ConstructionError",
    "DeserializationError",
    "ErrorCategory",
    "ErrorList",
    "HttpClient",
    "HttpSettings",
    "HttpxClient",
    "InvalidMethod",
    "InvalidURL",
    "PreparedRequest",
    "Request",
    "RequestAlreadySent",
    "RequestCancelled",
    "RequestContext",
    "RequesterError",
    "Response",
    "RetryPolicy",
    "RetryableStatusError",
    "SerializationError",
    "StatusAssertionError",
    "StubHttpClient",
    "TransportError",
    "background",
    "create_default_http_client",
    "load_http_settings",
    "send_with_retries",
    "setup_logging",
    "timeout_context",
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
    "__version__",
]
