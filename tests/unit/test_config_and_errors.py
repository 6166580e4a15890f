# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx

from requester import config, log
from requester.errors import (
    ConstructionError,
    ErrorCategory,
    ErrorList,
    InvalidURL,
    RequestCancelled,
    RequesterError,
    TransportError,
    categorize_exception,
    transport_error_from_exception,
)
from requester.version import __version__


def test_http_settings_from_env(monkeypatch):
    monkeypatch.setenv("REQUESTER_BASE_URL", "https://api.example")
    monkeypatch.setenv("REQUESTER_HTTP_TIMEOUT", "4.5")
    monkeypatch.setenv("REQUESTER_HTTP_RETRIES", "2")
    monkeypatch.setenv("REQUESTER_HTTP_BACKOFF_DELAY", "0.1")
    monkeypatch.setenv("REQUESTER_HTTP_BACKOFF_POLICY", "EXPONENTIAL")
    monkeypatch.setenv("REQUESTER_USER_AGENT", "UA/3")
    monkeypatch.setenv("REQUESTER_HTTP_REDIRECTS", "false")
    monkeypatch.setenv("REQUESTER_HTTP_VERIFY_SSL", "0")
    monkeypatch.setenv("REQUESTER_HTTP_MAX_BODY_BYTES", "1024")

    settings = config.load_http_settings()

    assert settings.base_url == "https://api.example"
    assert settings.timeout == 4.5
    assert settings.retries == 2
    assert settings.backoff_delay == 0.1
    assert settings.backoff_policy == "exponential"
    assert settings.user_agent == "UA/3"
    assert settings.allow_redirects is False
    assert settings.verify_ssl is False
    assert settings.max_body_bytes == 1024


def test_http_settings_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("REQUESTER_HTTP_TIMEOUT", "soon")
    monkeypatch.setenv("REQUESTER_HTTP_RETRIES", "many")
    monkeypatch.setenv("REQUESTER_HTTP_BACKOFF_DELAY", "-1")
    monkeypatch.setenv("REQUESTER_HTTP_BACKOFF_POLICY", "fibonacci")
    monkeypatch.setenv("REQUESTER_HTTP_MAX_BODY_BYTES", "0")

    settings = config.HttpSettings.from_env()

    assert settings.timeout == 30.0
    assert settings.retries == 0
    assert settings.backoff_delay == 1.0
    assert settings.backoff_policy == "linear"
    assert settings.max_body_bytes == 16 * 1024 * 1024
    assert settings.user_agent == f"requester/{__version__}"


def test_resolve_level():
    assert log.resolve_level("debug") == logging.DEBUG
    assert log.resolve_level(logging.ERROR) == logging.ERROR
    assert log.resolve_level("not-a-level") == logging.WARNING


def test_setup_logging_sets_package_level():
    logger = logging.getLogger(log.LOGGER_NAME)
    previous = logger.level
    try:
        log.setup_logging("debug")
        assert logger.level == logging.DEBUG
        assert logging.getLogger("requester.http.retry").getEffectiveLevel() == logging.DEBUG
    finally:
        logger.setLevel(previous)


def test_retry_warnings_are_logged(caplog):
    from requester.http.models import PreparedRequest, RetryPolicy
    from requester.http.retry import send_with_retries

    class Refusing:
        def send(self, request):
            raise ConnectionRefusedError("refused")

    with caplog.at_level(logging.WARNING, logger="requester"):
        send_with_retries(Refusing(), PreparedRequest("GET", "http://example/x"), RetryPolicy.create(2, 0))

    messages = [record.getMessage() for record in caplog.records]
    assert any("attempt 1/2 failed" in message for message in messages)
    assert any("failed after 2 attempt(s)" in message for message in messages)


def test_error_hierarchy():
    assert issubclass(InvalidURL, ConstructionError)
    assert issubclass(ConstructionError, RequesterError)
    assert issubclass(RequestCancelled, TransportError)
    assert issubclass(ErrorList, RequesterError)


def test_error_list_flattens_and_joins():
    first = InvalidURL("bad url")
    second = TransportError("refused", attempt=1)
    nested = ErrorList([first, None, ErrorList([second])])

    assert len(nested) == 2
    assert nested.unwrap() == [first, second]
    assert str(nested) == "bad url\nrefused"
    assert nested.first(TransportError) is second
    assert nested.first(RequestCancelled) is None
    assert ErrorList.join(None, None) is None
    assert ErrorList.join(nested, None).unwrap() == [first, second]
    assert not ErrorList()


def test_categorize_exception():
    request = httpx.Request("GET", "http://example")
    assert categorize_exception(httpx.ReadTimeout("slow", request=request)) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused", request=request)) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ssl.SSLError("bad cert")) is ErrorCategory.SSL_ERROR
    assert categorize_exception(socket.gaierror("no such host")) is ErrorCategory.DNS_ERROR
    assert categorize_exception(TimeoutError()) is ErrorCategory.TIMEOUT
    assert categorize_exception(ConnectionResetError()) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ValueError("?")) is ErrorCategory.UNKNOWN_ERROR


def test_transport_error_from_exception_keeps_cause():
    cause = ConnectionResetError()
    error = transport_error_from_exception(cause, 3)
    assert str(error) == "ConnectionResetError"
    assert error.attempt == 3
    assert error.__cause__ is cause

    existing = TransportError("already wrapped")
    assert transport_error_from_exception(existing, 2) is existing
    assert existing.attempt == 2
