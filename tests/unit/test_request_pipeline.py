# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import ssl

import pytest

from fallbackhttp.errors import ConfigurationError, ErrorCategory, RequestExecutionError
from fallbackhttp.http.adapters import StubConnectionProvider, StubReply
from fallbackhttp.http.body import FORM_CONTENT_TYPE, FormBody
from fallbackhttp.http.connection import Proxy
from fallbackhttp.http.request import Request
from fallbackhttp.http.tls import ClientCerts


def _request(url="http://test.only.com", method="GET", replies=None):
    provider = StubConnectionProvider(replies)
    return Request(url, method, connection_provider=provider), provider


def test_execute_configures_connection():
    request, provider = _request()
    request.timeout = 12.5
    request.allow_redirects = False
    request.proxy = Proxy.at("10.10.10.10", 1234, username="user", password="secret")

    response = request.execute()

    conn = provider.connections[0]
    assert conn.url == "http://test.only.com"
    assert conn.method == "GET"
    assert conn.follow_redirects is False
    assert conn.connect_timeout == 12.5
    assert conn.proxy.auth == ("user", "secret")
    assert conn.output_enabled is False
    assert conn.sent_body is None
    assert response.status_code == 200


def test_headers_are_case_insensitive_and_joined_on_transmission():
    request, provider = _request()
    request.header("A", "a1", "a2", "a3").header("a", "x1", "x2")

    headers = request.headers
    assert len(headers) == 1
    assert headers.keys() == ["a"]
    assert headers.get("A").values == ["a1", "a2", "a3", "x1", "x2"]

    request.execute()
    assert provider.connections[0].headers == {"A": "a1, a2, a3, x1, x2"}


def test_header_names_and_values_resolve_placeholders():
    request, provider = _request()
    request.placeholder("name", "Token").placeholder("v", "abc")
    request.header("X-{name}", "{v}", "{v}2")
    request.execute()
    assert provider.connections[0].headers == {"X-Token": "abc, abc2"}


def test_execute_works_on_a_copy_and_response_keeps_it():
    request, provider = _request("http://{h}/")
    request.placeholder("h", "one")
    response = request.execute()

    request.placeholder("h", "two").header("X-Later", "1")
    second = request.execute()

    assert provider.urls == ["http://one/", "http://two/"]
    assert response.request is not request
    assert response.request.placeholders == {"h": "one"}
    assert "X-Later" not in response.request.headers
    assert second.request.placeholders == {"h": "two"}


def test_copy_is_deep_and_equal():
    request = Request("http://test.only.com", allow_redirects=True, timeout=9.999, trust_all=True)
    request.header("x", "x1", "x2", "x3").placeholder("p", "PLACEHOLDER").query_param("q", "q1", "q2", "q3")
    request.proxy = Proxy.at("10.10.10.10", 1234, username="user", password="password")

    clone = request.copy()

    assert clone is not request
    assert clone.headers == request.headers
    assert clone._headers is not request._headers
    assert clone.placeholders == request.placeholders
    assert clone._placeholders is not request._placeholders
    assert clone.query_params == request.query_params
    assert clone._query_params is not request._query_params
    assert clone.proxy == request.proxy
    assert clone.timeout == request.timeout
    assert clone.trust_all == request.trust_all
    assert clone.url == request.url

    clone.header("x", "x4")
    clone.query_param("q", "q4")
    assert request.headers.get("x").values == ["x1", "x2", "x3"]
    assert request.query_params["q"] == ["q1", "q2", "q3"]


def test_original_and_copy_execute_into_independent_responses():
    provider = StubConnectionProvider([StubReply(body=b"first"), StubReply(body=b"second")])
    request = Request("http://example/{p}", connection_provider=provider).placeholder("p", "x").header("H", "1")
    clone = request.copy()

    with request.execute() as first, clone.execute() as second:
        assert first.body_as_string() == "first"
        assert not second.is_complete
        assert second.body_as_string() == "second"
        assert first.request.headers == second.request.headers
        assert first.request.headers is not second.request.headers
        assert first.request.placeholders == second.request.placeholders


def test_https_trust_all_without_client_certs():
    request, provider = _request("https://secure.example")
    request.trust_all = True

    request.execute()

    conn = provider.connections[0]
    assert conn.trusted_all_hosts is True
    assert conn.ssl_context is None


def test_trust_all_is_not_applied_to_prebuilt_context(caplog):
    context = ssl.create_default_context()
    request, provider = _request("https://secure.example")
    request.trust_all = True
    request.client_certs = ClientCerts.from_ssl_context(context)

    with caplog.at_level("WARNING", logger="fallbackhttp.http.request"):
        request.execute()

    conn = provider.connections[0]
    assert conn.trusted_all_hosts is False
    assert conn.ssl_context is context
    assert "trust_all ignored" in caplog.text


def test_trust_all_applies_to_fresh_pem_context(monkeypatch):
    fresh = ssl.create_default_context()
    monkeypatch.setattr(ClientCerts, "ssl_context", lambda self: fresh)
    request, provider = _request("https://secure.example")
    request.trust_all = True
    request.client_certs = ClientCerts.from_pem("client.pem")

    request.execute()

    conn = provider.connections[0]
    assert conn.trusted_all_hosts is True
    assert conn.ssl_context is fresh


def test_client_certs_without_context_are_skipped(tmp_path):
    request, provider = _request("https://secure.example")
    request.client_certs = ClientCerts.from_pem(tmp_path / "missing.pem")
    request.execute()
    assert provider.connections[0].ssl_context is None


def test_plain_http_ignores_tls_options():
    request, provider = _request("http://plain.example")
    request.trust_all = True
    request.client_certs = ClientCerts.from_ssl_context(ssl.create_default_context())
    request.execute()
    conn = provider.connections[0]
    assert conn.trusted_all_hosts is False
    assert conn.ssl_context is None


def test_post_streams_body_fully():
    request, provider = _request(method="POST")
    request.body("payload ✓").content_type("text/plain", "utf-8")
    request.execute()
    conn = provider.connections[0]
    assert conn.output_enabled is True
    assert conn.sent_body == "payload ✓".encode("utf-8")
    assert conn.headers["Content-Type"] == "text/plain; charset=utf-8"


def test_post_without_body_sends_empty_payload():
    request, provider = _request(method="PUT")
    request.execute()
    assert provider.connections[0].sent_body == b""


def test_stream_body_is_buffered_for_repeated_executions():
    request, provider = _request(method="POST")
    request.body(io.BytesIO(b"one-shot"))
    request.execute()
    request.execute()
    assert [conn.sent_body for conn in provider.connections] == [b"one-shot", b"one-shot"]


def test_body_on_get_is_rejected():
    request = Request("http://example")
    with pytest.raises(ConfigurationError):
        request.body("nope")
    with pytest.raises(ConfigurationError):
        request.form_field("a", "b")


def test_form_post_encodes_fields_with_placeholders():
    provider = StubConnectionProvider()
    request = Request.form_post("http://example/form", connection_provider=provider)
    request.placeholder("user", "jane doe")
    request.form_field("name", "{user}").form_field("tags", "a&b", "c")

    request.execute()

    conn = provider.connections[0]
    assert conn.sent_body == b"name=jane+doe&tags=a%26b&tags=c"
    assert conn.headers["Content-Type"] == FORM_CONTENT_TYPE
    assert request.form_fields == {"name": ["{user}"], "tags": ["a&b", "c"]}


def test_form_request_rejects_content_type():
    request = Request.post("http://example").form_field("a", "1")
    assert isinstance(request.body_source, FormBody)
    with pytest.raises(ConfigurationError):
        request.header("content-type", "text/plain")
    with pytest.raises(ConfigurationError):
        request.content_type("text/plain")


def test_body_on_form_request_is_rejected():
    request = Request.form_post("http://example").form_field("a", "1")
    with pytest.raises(ConfigurationError):
        request.body("raw")
    assert request.form_fields == {"a": ["1"]}


def test_form_fields_are_copied_independently():
    request = Request.form_post("http://example").form_field("a", "1")
    clone = request.copy()
    clone.form_field("a", "2")
    request.clear_form_fields()
    assert request.form_fields == {}
    assert clone.form_fields == {"a": ["1", "2"]}


def test_open_failure_is_wrapped():
    provider = StubConnectionProvider(open_error=ConnectionRefusedError("refused"))
    request = Request("http://example", connection_provider=provider)
    with pytest.raises(RequestExecutionError) as excinfo:
        request.execute()
    assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)
    assert excinfo.value.category == ErrorCategory.CONNECTION_ERROR


def test_failure_after_open_disconnects_connection():
    request, provider = _request(replies=[TimeoutError("slow")])
    with pytest.raises(RequestExecutionError) as excinfo:
        request.execute()
    assert excinfo.value.category == ErrorCategory.TIMEOUT
    assert provider.connections[0].disconnected is True


def test_method_factories():
    assert Request.get("http://e").method == "GET"
    assert Request.head("http://e").method == "HEAD"
    assert Request.options("http://e").method == "OPTIONS"
    assert Request.delete("http://e").method == "DELETE"
    assert Request.post("http://e").accepts_body
    assert Request.put("http://e").accepts_body
    assert Request.patch("http://e").accepts_body
    assert Request("http://e", "options").method == "OPTIONS"
    assert repr(Request.get("http://e/x")) == "GET http://e/x"


def test_defaults_come_from_settings(monkeypatch):
    monkeypatch.setenv("FALLBACKHTTP_CONNECT_TIMEOUT", "4.5")
    monkeypatch.setenv("FALLBACKHTTP_REDIRECTS", "false")
    request = Request("http://example")
    assert request.timeout == 4.5
    assert request.allow_redirects is False
