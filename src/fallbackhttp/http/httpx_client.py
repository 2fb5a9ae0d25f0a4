# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed ConnectionProvider implementation."""

from __future__ import annotations

import io
import ssl
from collections.abc import Iterator
from typing import Any, BinaryIO

import httpx

from ..config import HttpSettings, load_http_settings
from .connection import Proxy


class _OutputBuffer(io.BytesIO):
    """Request body sink whose bytes stay readable after the pipeline closes it."""

    payload: bytes = b""

    def close(self) -> None:
        if not self.closed:
            self.payload = self.getvalue()
        super().close()


class _ResponseBody(io.RawIOBase):
    """Raw stream over ``httpx.Response.iter_bytes()``; closing it closes the response."""

    def __init__(self, response: httpx.Response):
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # noqa: ANN001
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


def _trust_everything(verify: bool | ssl.SSLContext) -> ssl.SSLContext:
    context = verify if isinstance(verify, ssl.SSLContext) else ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class HttpxConnection:
    """
    One request/response exchange over a dedicated ``httpx.Client``.

    Configuration is collected until the first status, header or body read, which
    sends the request with ``stream=True`` so the body is pulled lazily.
    """

    def __init__(
        self,
        url: str,
        proxy: Proxy | None = None,
        settings: HttpSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.url = url
        self.proxy = proxy
        self.method = "GET"
        self.follow_redirects = self.settings.allow_redirects
        self.connect_timeout: float | None = self.settings.timeout
        self.output_enabled = False
        self._transport = transport
        self._headers: dict[str, tuple[str, str]] = {}
        self._verify: bool | ssl.SSLContext = self.settings.verify_ssl
        self._trust_all = False
        self._output: _OutputBuffer | None = None
        self._client: httpx.Client | None = None
        self._response: httpx.Response | None = None
        self._body: BinaryIO | None = None

    def set_header(self, name: str, value: str) -> None:
        self._headers[name.lower()] = (name, value)

    def trust_all_hosts(self) -> None:
        self._trust_all = True

    def use_ssl_context(self, context: ssl.SSLContext) -> None:
        """Combined with ``trust_all_hosts()`` this context loses verification; pass one owned by this connection."""
        self._verify = context

    def output_stream(self) -> BinaryIO:
        if not self.output_enabled:
            raise RuntimeError("Output is not enabled on this connection")
        if self._response is not None:
            raise RuntimeError("Request already sent")
        if self._output is None:
            self._output = _OutputBuffer()
        return self._output

    def _send(self) -> httpx.Response:
        if self._response is not None:
            return self._response

        verify = _trust_everything(self._verify) if self._trust_all else self._verify
        client_kwargs: dict[str, Any] = {
            "verify": verify,
            "follow_redirects": self.follow_redirects,
            "timeout": httpx.Timeout(self.settings.read_timeout, connect=self.connect_timeout),
        }
        if self.proxy is not None:
            client_kwargs["proxy"] = httpx.Proxy(self.proxy.url, auth=self.proxy.auth)
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        self._client = httpx.Client(**client_kwargs)

        headers = httpx.Headers(list(self._headers.values()))
        if "user-agent" not in headers and self.settings.user_agent:
            headers["User-Agent"] = self.settings.user_agent
        content = None
        if self.output_enabled and self._output is not None:
            content = self._output.payload if self._output.closed else self._output.getvalue()

        try:
            request = self._client.build_request(self.method, self.url, headers=headers, content=content)
            self._response = self._client.send(request, stream=True)
        except Exception:
            self._client.close()
            self._client = None
            raise
        return self._response

    def status_code(self) -> int:
        return self._send().status_code

    def reason_phrase(self) -> str:
        return self._send().reason_phrase

    def header_fields(self) -> dict[str | None, list[str]]:
        fields: dict[str | None, list[str]] = {}
        for name, value in self._send().headers.multi_items():
            fields.setdefault(name, []).append(value)
        return fields

    def _body_stream(self) -> BinaryIO:
        if self._body is None:
            self._body = io.BufferedReader(_ResponseBody(self._send()))  # type: ignore[assignment]
        return self._body  # type: ignore[return-value]

    def input_stream(self) -> BinaryIO | None:
        return self._body_stream()

    def error_stream(self) -> BinaryIO | None:
        if self._send().status_code >= 400:
            return self._body_stream()
        return None

    def disconnect(self) -> None:
        if self._response is not None:
            self._response.close()
        if self._client is not None:
            self._client.close()
            self._client = None

    def __repr__(self) -> str:
        return f"<HttpxConnection {self.method} {self.url}>"


class HttpxConnectionProvider:
    """Opens an HttpxConnection per request; ``transport`` is forwarded for testing or custom routing."""

    def __init__(self, settings: HttpSettings | None = None, transport: httpx.BaseTransport | None = None):
        self.settings = settings or load_http_settings()
        self._transport = transport

    def open(self, url: str, proxy: Proxy | None = None) -> HttpxConnection:
        return HttpxConnection(url, proxy, settings=self.settings, transport=self._transport)


__all__ = ["HttpxConnection", "HttpxConnectionProvider"]
