# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fallbackhttp."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"fallbackhttp/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 30.0
    read_timeout: float | None = None
    max_retries: int = 1
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_workers: int = 8

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_workers = _int_env("FALLBACKHTTP_MAX_WORKERS", cls.max_workers)
        if max_workers <= 0:
            max_workers = cls.max_workers
        return cls(
            timeout=_float_env("FALLBACKHTTP_CONNECT_TIMEOUT", cls.timeout),
            read_timeout=_optional_float_env("FALLBACKHTTP_READ_TIMEOUT", cls.read_timeout),
            max_retries=_int_env("FALLBACKHTTP_RETRIES", cls.max_retries),
            backoff_factor=_float_env("FALLBACKHTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("FALLBACKHTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("FALLBACKHTTP_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("FALLBACKHTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("FALLBACKHTTP_VERIFY_SSL", cls.verify_ssl),
            max_workers=max_workers,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
