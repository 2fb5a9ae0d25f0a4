# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Binary stream wrapper that reports when it is closed."""

from __future__ import annotations

import io
import time
from collections.abc import Callable
from typing import BinaryIO


class CloseObservingStream(io.RawIOBase):
    """
    Delegates reads to ``wrapped`` and calls ``on_close(timestamp)`` once, on first close.

    Timestamps come from ``time.monotonic()``.
    """

    def __init__(self, wrapped: BinaryIO, on_close: Callable[[float], None]):
        super().__init__()
        self._wrapped = wrapped
        self._on_close = on_close

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # noqa: ANN001
        readinto = getattr(self._wrapped, "readinto", None)
        if callable(readinto):
            return readinto(buffer) or 0
        data = self._wrapped.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self._wrapped.read()
        return self._wrapped.read(size)

    def readall(self) -> bytes:
        return self._wrapped.read()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._wrapped.close()
        finally:
            super().close()
            self._on_close(time.monotonic())


__all__ = ["CloseObservingStream"]
