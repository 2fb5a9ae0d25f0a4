# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import ssl

import httpx

from fallbackhttp.http.body import FORM_CONTENT_TYPE, FormBody, RepeatableBody
from fallbackhttp.http.headers import HeaderMap, HeaderValues
from fallbackhttp.http.tls import ClientCerts


def test_header_map_is_case_insensitive_and_keeps_first_casing():
    headers = HeaderMap()
    headers.add("X-Trace", "1")
    headers.add("x-trace", "2")
    assert headers.get("X-TRACE") == HeaderValues("X-Trace", ["1", "2"])
    assert headers.value("x-trace") == "1, 2"
    assert headers.value("missing", "none") == "none"
    assert "x-TRACE" in headers
    assert 42 not in headers


def test_header_map_set_replaces_and_remove_deletes():
    headers = HeaderMap({"Accept": ["a", "b"]})
    headers.set("ACCEPT", "c")
    assert headers.to_dict() == {"ACCEPT": ["c"]}
    headers.remove("accept")
    assert len(headers) == 0
    headers.remove("accept")


def test_header_map_accepts_httpx_headers_and_pairs():
    from_httpx = HeaderMap(httpx.Headers([("Set-Cookie", "a"), ("Set-Cookie", "b"), ("Server", "x")]))
    assert from_httpx.get("set-cookie").values == ["a", "b"]
    from_pairs = HeaderMap([("A", "1"), ("a", "2"), (None, "status")])
    assert from_pairs.keys() == ["a"]
    assert from_pairs.get("a").values == ["1", "2"]


def test_header_map_copy_is_deep():
    original = HeaderMap({"A": ["1"]})
    clone = original.copy()
    clone.add("A", "2")
    assert original.get("a").values == ["1"]
    assert clone != original


def test_repeatable_body_replays_bytes_and_text():
    assert RepeatableBody(b"raw").open().read() == b"raw"
    body = RepeatableBody("zażółć", encoding="utf-8")
    assert body.open().read() == "zażółć".encode("utf-8")
    assert body.open().read() == "zażółć".encode("utf-8")


def test_repeatable_body_reads_stream_once_and_closes_it():
    source = io.BytesIO(b"stream")
    body = RepeatableBody(source)
    assert body.open().read() == b"stream"
    assert source.closed
    assert body.open().read() == b"stream"


def test_form_body_encoding():
    form = FormBody()
    form.add("q", "a b", "c/d")
    form.add("{k}", "{v}")
    assert form.encode() == "q=a+b&q=c%2Fd&%7Bk%7D=%7Bv%7D"
    resolved = form.render(lambda text: text.replace("{k}", "key").replace("{v}", "value"))
    assert resolved.content_type == FORM_CONTENT_TYPE
    assert resolved.open().read() == b"q=a+b&q=c%2Fd&key=value"


def test_client_certs_prebuilt_context_is_returned():
    context = ssl.create_default_context()
    assert ClientCerts.from_ssl_context(context).ssl_context() is context


def test_client_certs_unreadable_files_are_logged(tmp_path, caplog):
    broken = tmp_path / "broken.pem"
    broken.write_text("not a certificate")
    certs = ClientCerts.from_pem(broken, password="s3cret-pass")
    with caplog.at_level("WARNING", logger="fallbackhttp.http.tls"):
        assert certs.ssl_context() is None
    assert "Could not load client certificate" in caplog.text
    assert "s3cret-pass" not in repr(certs)


def test_client_certs_without_material():
    assert ClientCerts().ssl_context() is None
