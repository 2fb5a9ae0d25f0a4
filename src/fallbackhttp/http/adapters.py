# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deterministic, programmable connections for tests and offline use."""

from __future__ import annotations

import io
import ssl
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from .connection import Proxy


@dataclass
class StubReply:
    """Canned outcome for one opened connection; ``body`` may be bytes or a readable stream."""

    status_code: int = 200
    reason: str = "OK"
    headers: Mapping[str, list[str]] = field(default_factory=dict)
    body: bytes | BinaryIO = b""


ReplySpec = Union[StubReply, BaseException, Callable[["StubConnection"], "StubReply"]]


class _CapturingBuffer(io.BytesIO):
    def __init__(self, sink: Callable[[bytes], None]):
        super().__init__()
        self._sink = sink

    def close(self) -> None:
        if not self.closed:
            self._sink(self.getvalue())
        super().close()


class StubConnection:
    """Records everything the pipeline configures and replays a StubReply."""

    def __init__(self, url: str, proxy: Proxy | None, reply: ReplySpec):
        self.url = url
        self.proxy = proxy
        self.method = "GET"
        self.follow_redirects = True
        self.connect_timeout: float | None = None
        self.output_enabled = False
        self.headers: dict[str, str] = {}
        self.sent_body: bytes | None = None
        self.trusted_all_hosts = False
        self.ssl_context: ssl.SSLContext | None = None
        self.disconnected = False
        self._reply_spec = reply
        self._reply: StubReply | None = None
        self._body: BinaryIO | None = None

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def trust_all_hosts(self) -> None:
        self.trusted_all_hosts = True

    def use_ssl_context(self, context: ssl.SSLContext) -> None:
        self.ssl_context = context

    def output_stream(self) -> BinaryIO:
        if not self.output_enabled:
            raise RuntimeError("Output is not enabled on this connection")
        return _CapturingBuffer(self._capture)

    def _capture(self, payload: bytes) -> None:
        self.sent_body = payload

    def _resolve(self) -> StubReply:
        if self._reply is None:
            spec = self._reply_spec
            if isinstance(spec, BaseException):
                raise spec
            self._reply = spec(self) if callable(spec) else spec
        return self._reply

    def status_code(self) -> int:
        return self._resolve().status_code

    def reason_phrase(self) -> str:
        return self._resolve().reason

    def header_fields(self) -> dict[str | None, list[str]]:
        return {name: list(values) for name, values in self._resolve().headers.items()}

    def _stream(self) -> BinaryIO:
        if self._body is None:
            body = self._resolve().body
            self._body = io.BytesIO(body) if isinstance(body, (bytes, bytearray)) else body
        return self._body

    def input_stream(self) -> BinaryIO | None:
        return self._stream()

    def error_stream(self) -> BinaryIO | None:
        if self._resolve().status_code >= 400:
            return self._stream()
        return None

    @property
    def body_closed(self) -> bool:
        return self._body is not None and self._body.closed

    def disconnect(self) -> None:
        self.disconnected = True


class StubConnectionProvider:
    """
    Hands out StubConnections with replies taken from ``replies`` in order.

    Each reply is a StubReply, an exception raised when the status is read, or a
    callable receiving the connection. The last reply repeats once the sequence runs
    out; with no replies every connection answers ``200 OK`` with an empty body.
    """

    def __init__(self, replies: Iterable[ReplySpec] | None = None, *, open_error: BaseException | None = None):
        self._replies: list[ReplySpec] = list(replies or [])
        self._open_error = open_error
        self.connections: list[StubConnection] = []
        self._lock = threading.Lock()

    def add(self, reply: ReplySpec) -> None:
        self._replies.append(reply)

    def open(self, url: str, proxy: Proxy | None = None) -> StubConnection:
        if self._open_error is not None:
            raise self._open_error
        with self._lock:
            index = len(self.connections)
            if self._replies:
                reply = self._replies[min(index, len(self._replies) - 1)]
            else:
                reply = StubReply()
            connection = StubConnection(url, proxy, reply)
            self.connections.append(connection)
        return connection

    @property
    def calls(self) -> int:
        return len(self.connections)

    @property
    def urls(self) -> list[str]:
        return [connection.url for connection in self.connections]


__all__ = ["StubConnection", "StubConnectionProvider", "StubReply"]
