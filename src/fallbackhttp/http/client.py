# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Executable request contract, async dispatch and the default connection factory."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import TYPE_CHECKING, Protocol

from ..config import HttpSettings, load_http_settings
from .connection import ConnectionProvider

if TYPE_CHECKING:
    from ..fallback.session import FallbackSession
    from .response import Response


class Executable(Protocol):
    """Anything that can be executed into a Response: a single request or a fallback plan."""

    def execute(self) -> Response: ...

    def execute_attempt(self, session: FallbackSession) -> Response: ...

    def execute_async(
        self,
        on_success: Callable[[Response], object],
        on_error: Callable[[BaseException], object],
        executor: Executor | None = None,
    ) -> None: ...

    def submit(self, executor: Executor | None = None) -> Future[Response]: ...


class AsyncExecutionMixin:
    """
    Async variants built on top of the blocking ``execute()``.

    Nothing here is non-blocking: the whole invocation, backoff waits included, runs
    on one worker of the executor.
    """

    def execute(self) -> Response:  # pragma: no cover - implemented by subclasses
        raise NotImplementedError

    def execute_async(
        self,
        on_success: Callable[[Response], object],
        on_error: Callable[[BaseException], object],
        executor: Executor | None = None,
    ) -> None:
        """Run ``execute()`` on ``executor`` and hand the outcome to exactly one callback."""

        def _run() -> None:
            try:
                response = self.execute()
            except Exception as exc:  # noqa: BLE001
                on_error(exc)
                return
            on_success(response)

        _resolve_executor(executor).submit(_run)

    def submit(self, executor: Executor | None = None) -> Future[Response]:
        """Run ``execute()`` on ``executor``; the future raises the execution error on failure."""
        return _resolve_executor(executor).submit(self.execute)


def _resolve_executor(executor: Executor | None) -> Executor:
    if executor is not None:
        return executor
    from ..runtime import get_default_executor

    return get_default_executor()


def create_default_connection_provider(settings: HttpSettings | None = None) -> ConnectionProvider:
    """Factory for the default httpx-backed provider."""
    from .httpx_client import HttpxConnectionProvider

    return HttpxConnectionProvider(settings or load_http_settings())


__all__ = ["AsyncExecutionMixin", "Executable", "create_default_connection_provider"]
