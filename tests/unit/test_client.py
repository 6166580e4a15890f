# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import unittest

import pytest

from requester import Client, HttpSettings, with_status_code_assertion, with_unmarshal_json
from requester.context import RequestContext, timeout_context
from requester.errors import InvalidMethod, InvalidURL
from requester.http.adapters import StubHttpClient
from requester.http.httpx_client import HttpxClient
from requester.http.models import BackoffPolicy, Response
from requester.http.url import join_url


def make_client(base_url="https://test.com", responses=None, **settings):
    stub = StubHttpClient(responses)
    return Client(base_url, http_client=stub, settings=HttpSettings(**settings)), stub


def test_request_joins_routes_onto_base_url():
    client, _ = make_client("https://test.com/api")
    request = client.request("GET", "v1", "items/", "42")
    assert str(request.url) == "https://test.com/api/v1/items/42"
    assert request.error is None


def test_join_url_keeps_trailing_slash_and_cleans_segments():
    assert join_url("https://test.com/api/", "/v1/", "items/") == "https://test.com/api/v1/items/"
    assert join_url("https://test.com", "a", "..", "b") == "https://test.com/b"
    assert join_url("https://test.com") == "https://test.com"
    assert join_url(None, "https://test.com/a", "b") == "https://test.com/a/b"
    assert join_url("", "https://test.com/x") == "https://test.com/x"


def test_request_without_base_url_takes_full_url_route():
    client, _ = make_client(base_url="")
    request = client.get("https://test.com/1", "2")
    assert str(request.url) == "https://test.com/1/2"
    assert request.method == "GET"


def test_invalid_url_is_recorded_and_never_sent():
    client, stub = make_client(base_url="")
    request = client.request("GET", "#")

    assert request.url.scheme == ""
    assert isinstance(request.error.first(), InvalidURL)

    response = request.do(with_status_code_assertion(200))
    assert stub.requests == []
    assert response.status_code == 0
    assert response.error is request.error


def test_invalid_method_raises():
    client, _ = make_client()
    with pytest.raises(InvalidMethod):
        client.request("INVALID HTTP VERB", "x")


def test_empty_method_defaults_to_get():
    client, _ = make_client()
    assert client.request("", "x").method == "GET"


@pytest.mark.parametrize(
    "factory,method",
    [("get", "GET"), ("post", "POST"), ("put", "PUT"), ("patch", "PATCH"), ("delete", "DELETE")],
)
def test_method_shortcuts(factory, method):
    client, _ = make_client()
    request = getattr(client, factory)("items")
    assert request.method == method
    assert str(request.url) == "https://test.com/items"


def test_requests_inherit_retry_settings():
    client, _ = make_client(retries=3, backoff_delay=0.2, backoff_policy="exponential")
    policy = client.get("items").retry_policy
    assert policy.retries == 3
    assert policy.delay == 0.2
    assert policy.policy is BackoffPolicy.EXPONENTIAL


def test_base_url_defaults_to_settings():
    client = Client(http_client=StubHttpClient(), settings=HttpSettings(base_url="https://configured.example/v2"))
    assert str(client.get("items").url) == "https://configured.example/v2/items"


def test_context_is_attached_to_request():
    client, _ = make_client()
    context = timeout_context(30)
    assert client.get("items", context=context).context is context
    assert isinstance(client.get("items").context, RequestContext)


def test_end_to_end_retry_then_decode():
    target = {}
    client, stub = make_client(
        responses={
            "https://test.com/items": [
                ConnectionResetError("reset by peer"),
                Response(status_code=200, content=b'{"count": 2}'),
            ]
        },
        retries=2,
        backoff_delay=0,
    )

    response = client.get("items").do()

    assert response.status_code == 200
    assert response.attempts == 2
    assert len(stub.requests) == 2
    assert len(response.error) == 1
    assert response.handle(with_status_code_assertion(200), with_unmarshal_json(target)) is response.error
    assert target == {}


def test_end_to_end_success_decodes_body():
    target = {}
    client, _ = make_client(responses={"https://test.com/items": Response(status_code=200, content=b'{"count": 2}')})

    response = client.get("items").do()

    assert response.handle(with_status_code_assertion(200), with_unmarshal_json(target)) is None
    assert target == {"count": 2}


class ClientLifecycleTests(unittest.TestCase):
    def test_context_manager_closes_transport(self):
        stub = StubHttpClient()
        with Client("https://test.com", http_client=stub, settings=HttpSettings()) as client:
            self.assertIs(client.http_client, stub)
        self.assertTrue(stub.closed)

    def test_default_transport_is_httpx(self):
        client = Client("https://test.com", settings=HttpSettings(timeout=5.0))
        try:
            self.assertIsInstance(client.http_client, HttpxClient)
            self.assertEqual(client.http_client.settings.timeout, 5.0)
        finally:
            client.close()

    def test_close_ignores_transport_errors(self):
        class ExplodingClose(StubHttpClient):
            def close(self):
                raise RuntimeError("already closed")

        Client("https://test.com", http_client=ExplodingClose(), settings=HttpSettings()).close()
