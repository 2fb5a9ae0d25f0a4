# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fallback plan exports."""

from ..http.retry import BackoffStrategy, RetryStrategy
from .plan import FallbackRequest, PlanEntry
from .session import FallbackSession

__all__ = [
    "BackoffStrategy",
    "FallbackRequest",
    "FallbackSession",
    "PlanEntry",
    "RetryStrategy",
]
