# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry and backoff policies consulted by fallback plans.

Both policy types are stateless: they map an attempt number (1-based, as tracked by
the fallback session) to a decision, so a single instance can be shared between plans
and threads.
"""

from __future__ import annotations

from collections.abc import Callable

from ..config import HttpSettings, load_http_settings


class RetryStrategy:
    """Decides whether another attempt may follow attempt ``attempt_no``."""

    __slots__ = ("_decide", "_label")

    def __init__(self, decide: Callable[[int], bool], label: str = "custom"):
        self._decide = decide
        self._label = label

    def should_retry(self, attempt_no: int) -> bool:
        return bool(self._decide(attempt_no))

    def __repr__(self) -> str:
        return f"RetryStrategy({self._label})"

    @classmethod
    def forever(cls) -> RetryStrategy:
        return cls(lambda _attempt_no: True, "forever")

    @classmethod
    def max_total_tries(cls, max_tries: int) -> RetryStrategy:
        """Allow attempts while the attempt number is below ``max_tries`` (1 means no retries)."""
        return cls(lambda attempt_no: attempt_no < max_tries, f"max_total_tries={max_tries}")

    @classmethod
    def from_settings(cls, settings: HttpSettings | None = None) -> RetryStrategy:
        """Build a retry policy from the shared HttpSettings."""
        settings = settings or load_http_settings()
        return cls.max_total_tries(max(1, settings.max_retries))


class BackoffStrategy:
    """Maps an attempt number to the delay, in milliseconds, before the next attempt."""

    __slots__ = ("_delay", "_label")

    def __init__(self, delay: Callable[[int], float], label: str = "custom"):
        self._delay = delay
        self._label = label

    def delay(self, attempt_no: int) -> float:
        return float(self._delay(attempt_no))

    def __repr__(self) -> str:
        return f"BackoffStrategy({self._label})"

    @classmethod
    def none(cls) -> BackoffStrategy:
        return cls(lambda _attempt_no: 0.0, "none")

    @classmethod
    def specified(cls, *delays: float) -> BackoffStrategy:
        """
        Use ``delays[k - 1]`` for attempt ``k``; the last delay repeats once the list runs out.

        Attempt numbers below 1 and an empty list give no delay.
        """
        values = tuple(delays)

        def _pick(attempt_no: int) -> float:
            if attempt_no < 1 or not values:
                return 0.0
            return values[min(attempt_no, len(values)) - 1]

        return cls(_pick, "specified=" + ",".join(str(value) for value in values))

    @classmethod
    def exponential(cls, initial: float, factor: float = 2.0, maximum: float | None = None) -> BackoffStrategy:
        def _grow(attempt_no: int) -> float:
            if attempt_no < 1:
                return 0.0
            delay = initial * (factor ** (attempt_no - 1))
            if maximum is not None:
                delay = min(delay, maximum)
            return delay

        return cls(_grow, f"exponential={initial}x{factor}")

    @classmethod
    def from_settings(cls, settings: HttpSettings | None = None) -> BackoffStrategy:
        """Build an exponential backoff from the shared HttpSettings (whose initial delay is in seconds)."""
        settings = settings or load_http_settings()
        return cls.exponential(settings.initial_delay * 1000.0, settings.backoff_factor)


__all__ = ["BackoffStrategy", "RetryStrategy"]
