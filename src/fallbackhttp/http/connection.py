# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Connection abstraction driven by the request pipeline.

A ConnectionProvider opens one Connection per resolved URL. The pipeline configures it
(method, headers, redirects, timeout, TLS), streams the request body into it and then
reads status, headers and the body stream back out. Implementations decide when the
request is actually sent; the httpx implementation sends on the first status read.
"""

from __future__ import annotations

import ssl
from collections.abc import Mapping
from dataclasses import dataclass
from typing import BinaryIO, Protocol


@dataclass(frozen=True)
class Proxy:
    """Proxy endpoint plus the credentials used for this proxy only."""

    url: str
    username: str | None = None
    password: str | None = None

    @classmethod
    def at(cls, host: str, port: int, *, scheme: str = "http", username: str | None = None, password: str | None = None) -> Proxy:
        return cls(url=f"{scheme}://{host}:{port}", username=username, password=password)

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username is None:
            return None
        return (self.username, self.password or "")

    def __repr__(self) -> str:
        # Never leak the password into logs.
        user = f", username={self.username!r}" if self.username is not None else ""
        return f"Proxy(url={self.url!r}{user})"


class Connection(Protocol):
    """A single configurable HTTP exchange."""

    url: str
    method: str
    follow_redirects: bool
    connect_timeout: float | None
    output_enabled: bool

    def set_header(self, name: str, value: str) -> None: ...

    def output_stream(self) -> BinaryIO: ...

    def status_code(self) -> int: ...

    def reason_phrase(self) -> str: ...

    def header_fields(self) -> Mapping[str | None, list[str]]: ...

    def input_stream(self) -> BinaryIO | None: ...

    def error_stream(self) -> BinaryIO | None: ...

    def disconnect(self) -> None: ...


class SecureConnection(Connection, Protocol):
    """Connection to an https URL."""

    def trust_all_hosts(self) -> None: ...

    def use_ssl_context(self, context: ssl.SSLContext) -> None: ...


class ConnectionProvider(Protocol):
    """Opens connections for resolved URLs."""

    def open(self, url: str, proxy: Proxy | None = None) -> Connection: ...


__all__ = ["Connection", "ConnectionProvider", "Proxy", "SecureConnection"]
