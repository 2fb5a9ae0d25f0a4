# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response wrapper with body-stream timing and charset detection."""

from __future__ import annotations

import codecs
import io
import logging
import time
from contextlib import suppress
from typing import TYPE_CHECKING, BinaryIO, TextIO

from .headers import HeaderMap, HeaderValues
from .stream import CloseObservingStream

if TYPE_CHECKING:
    from .connection import Connection
    from .request import Request

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"


class Response:
    """
    Result of one executed request.

    ``started_at`` is taken when the pipeline starts; ``finished_at`` only once the
    body stream is closed, either explicitly or by draining it through
    ``body_as_bytes()``/``body_as_string()``. Release the response (``with response:``
    or ``release()``) to free the underlying connection.
    """

    def __init__(
        self,
        request: Request | None,
        status_code: int,
        reason: str = "",
        headers: HeaderMap | None = None,
        body: BinaryIO | None = None,
        *,
        started_at: float | None = None,
        connection: Connection | None = None,
    ):
        self.request = request
        self.status_code = status_code
        self.reason = reason
        self.headers = headers if headers is not None else HeaderMap()
        self.started_at = started_at if started_at is not None else time.monotonic()
        self.finished_at: float | None = None
        self._connection = connection
        self._content: bytes | None = None
        if body is None:
            self._stream: CloseObservingStream = CloseObservingStream(io.BytesIO(b""), self._mark_finished)
            self._stream.close()
        else:
            self._stream = CloseObservingStream(body, self._mark_finished)

    @classmethod
    def from_connection(cls, request: Request, connection: Connection, started_at: float) -> Response:
        """Read status, message, headers and the body stream from a configured connection."""
        status_code = connection.status_code()
        reason = connection.reason_phrase() or ""
        headers = HeaderMap(connection.header_fields())
        body = connection.error_stream()
        if body is None:
            body = connection.input_stream()
        return cls(
            request,
            status_code,
            reason,
            headers,
            body,
            started_at=started_at,
            connection=connection,
        )

    def _mark_finished(self, timestamp: float) -> None:
        if self.finished_at is None:
            self.finished_at = timestamp

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def is_complete(self) -> bool:
        return self.finished_at is not None

    @property
    def elapsed(self) -> float:
        """Seconds from start to body close, or to now while the body is still open."""
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    def header(self, name: str) -> HeaderValues | None:
        return self.headers.get(name)

    def body_as_stream(self) -> BinaryIO:
        return self._stream  # type: ignore[return-value]

    def body_as_reader(self, charset: str | None = None) -> TextIO:
        return io.TextIOWrapper(io.BufferedReader(self._stream), encoding=charset or self.detect_charset())

    def body_as_bytes(self) -> bytes:
        """Read the remaining body, close the stream and cache the bytes."""
        if self._content is None:
            try:
                self._content = b"" if self._stream.closed else self._stream.readall()
            finally:
                self._stream.close()
        return self._content

    def body_as_string(self, charset: str | None = None) -> str:
        return self.body_as_bytes().decode(charset or self.detect_charset(), errors="replace")

    def detect_charset(self) -> str:
        """Charset parameter of the first Content-Type value when it names a known codec."""
        content_type = self.headers.get("Content-Type")
        first = content_type.first() if content_type else None
        for item in (first or "").split(";"):
            key, _, value = item.strip().partition("=")
            if key.strip().lower() != "charset":
                continue
            value = value.strip().strip('"').strip()
            if not value:
                continue
            try:
                return codecs.lookup(value).name
            except LookupError:
                logger.debug("Unknown charset %r, using %s", value, DEFAULT_CHARSET)
        return DEFAULT_CHARSET

    def release(self) -> float | None:
        """Close the body stream and the connection; return ``finished_at``."""
        with suppress(OSError):
            self._stream.close()
        if self._connection is not None:
            self._connection.disconnect()
            self._connection = None
        return self.finished_at

    def close(self) -> None:
        self.release()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.release()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason}]>"


__all__ = ["DEFAULT_CHARSET", "Response"]
