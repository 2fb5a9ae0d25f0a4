# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fallbackhttp package entrypoint.

Requests are described declaratively (method, URL with ``{placeholder}`` tokens,
headers, query parameters, body, TLS options) and executed through an injectable
connection provider, httpx by default. FallbackRequest composes requests, and other
fallback plans, into ordered candidates with per-candidate retry and backoff
policies. Single requests and plans share one execution contract: ``execute()``,
``execute_async()`` and ``submit()``.
"""

from .config import HttpSettings, load_http_settings
from .errors import (
    ConfigurationError,
    ErrorCategory,
    FallbackExhaustedError,
    FallbackHttpError,
    RequestExecutionError,
)
from .fallback import FallbackRequest, FallbackSession, PlanEntry
from .http import (
    BackoffStrategy,
    ClientCerts,
    ConnectionProvider,
    FormBody,
    HeaderMap,
    HeaderValues,
    HttpxConnectionProvider,
    Proxy,
    RepeatableBody,
    Request,
    Response,
    RetryStrategy,
    StubConnectionProvider,
    StubReply,
    create_default_connection_provider,
)
from .log import setup_logging
from .runtime import get_default_executor, shutdown_default_executor
from .version import __version__

__all__ = [
    "BackoffStrategy",
    "ClientCerts",
    "ConfigurationError",
    "ConnectionProvider",
    "ErrorCategory",
    "FallbackExhaustedError",
    "FallbackHttpError",
    "FallbackRequest",
    "FallbackSession",
    "FormBody",
    "HeaderMap",
    "HeaderValues",
    "HttpSettings",
    "HttpxConnectionProvider",
    "PlanEntry",
    "Proxy",
    "RepeatableBody",
    "Request",
    "RequestExecutionError",
    "Response",
    "RetryStrategy",
    "StubConnectionProvider",
    "StubReply",
    "create_default_connection_provider",
    "get_default_executor",
    "load_http_settings",
    "setup_logging",
    "shutdown_default_executor",
    "__version__",
]
