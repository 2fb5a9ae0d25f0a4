# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process-wide default executor for asynchronous request execution."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from .config import HttpSettings, load_http_settings

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_default_executor: ThreadPoolExecutor | None = None


def get_default_executor(settings: HttpSettings | None = None) -> ThreadPoolExecutor:
    """
    Return the shared executor, creating it on first use.

    ``settings.max_workers`` only matters for the call that creates the pool.
    """
    global _default_executor
    with _lock:
        if _default_executor is None:
            max_workers = (settings or load_http_settings()).max_workers
            logger.debug("Starting default executor with %d workers", max_workers)
            _default_executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fallbackhttp")
        return _default_executor


def shutdown_default_executor(wait: bool = True) -> None:
    """Shut the shared executor down; the next async call starts a new one."""
    global _default_executor
    with _lock:
        executor, _default_executor = _default_executor, None
    if executor is not None:
        executor.shutdown(wait=wait)


__all__ = ["get_default_executor", "shutdown_default_executor"]
