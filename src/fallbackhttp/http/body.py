# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Outbound request bodies."""

from __future__ import annotations

import io
import threading
from collections.abc import Callable
from typing import BinaryIO, Protocol
from urllib.parse import quote_plus

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class BodySource(Protocol):
    """Yields a fresh binary stream of the payload each time it is opened."""

    content_type: str | None

    def open(self) -> BinaryIO: ...


class RepeatableBody:
    """
    In-memory payload that can be sent any number of times.

    A one-shot stream is read fully on the first ``open()`` and closed; later opens
    (retries, copies of the request) replay the buffered bytes.
    """

    content_type: str | None = None

    def __init__(self, data: bytes | bytearray | str | BinaryIO = b"", *, encoding: str = "utf-8"):
        self._lock = threading.Lock()
        self._stream: BinaryIO | None = None
        if isinstance(data, str):
            self._data = data.encode(encoding)
        elif isinstance(data, (bytes, bytearray, memoryview)):
            self._data = bytes(data)
        else:
            self._data = b""
            self._stream = data

    def open(self) -> BinaryIO:
        with self._lock:
            if self._stream is not None:
                with self._stream as stream:
                    self._data = stream.read()
                self._stream = None
            return io.BytesIO(self._data)

    def __repr__(self) -> str:
        if self._stream is not None:
            return "RepeatableBody(<unread stream>)"
        return f"RepeatableBody({len(self._data)} bytes)"


class FormBody:
    """Form fields, url-encoded when the request is executed."""

    content_type = FORM_CONTENT_TYPE

    def __init__(self, fields: dict[str, list[str]] | None = None):
        self.fields: dict[str, list[str]] = {name: list(values) for name, values in (fields or {}).items()}

    def add(self, name: str, *values: str) -> None:
        self.fields.setdefault(name, []).extend(values)

    def clear(self) -> None:
        self.fields.clear()

    def copy(self) -> FormBody:
        return FormBody(self.fields)

    def encode(self, resolve: Callable[[str], str] | None = None) -> str:
        """Resolve placeholders in each name and value and url-encode them."""
        resolve = resolve or (lambda text: text)
        pairs: list[str] = []
        for name, values in self.fields.items():
            encoded_name = quote_plus(resolve(name))
            pairs.extend(f"{encoded_name}={quote_plus(resolve(value))}" for value in values)
        return "&".join(pairs)

    def render(self, resolve: Callable[[str], str] | None = None) -> RepeatableBody:
        body = RepeatableBody(self.encode(resolve))
        body.content_type = self.content_type
        return body

    def open(self) -> BinaryIO:
        return self.render().open()

    def __repr__(self) -> str:
        return f"FormBody({self.fields!r})"


__all__ = ["BodySource", "FORM_CONTENT_TYPE", "FormBody", "RepeatableBody"]
