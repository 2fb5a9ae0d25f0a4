# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .http.response import Response


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    PROXY_ERROR = "PROXY_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    FALLBACK_EXHAUSTED = "FALLBACK_EXHAUSTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FallbackHttpError(Exception):
    """Base class for every error raised by fallbackhttp."""


class ConfigurationError(FallbackHttpError, ValueError):
    """A request was configured with an invalid URL, placeholder or body."""


class RequestExecutionError(FallbackHttpError):
    """
    Executing a request failed.

    The original exception is chained as ``__cause__``; ``category`` classifies it.
    """

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category


class FallbackExhaustedError(RequestExecutionError):
    """Every entry of a fallback plan failed."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.FALLBACK_EXHAUSTED,
        last_response: Response | None = None,
        attempt: str | None = None,
    ):
        super().__init__(message, category=category)
        self.last_response = last_response
        self.attempt = attempt


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, RequestExecutionError):
        return exc.category

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.ProxyError):
        return ErrorCategory.PROXY_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError)):
        cause = exc.__cause__ or exc.__context__
        if isinstance(cause, ssl.SSLError):
            return ErrorCategory.SSL_ERROR
        if isinstance(cause, socket.gaierror):
            return ErrorCategory.DNS_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (TimeoutError, socket.timeout)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.PROXY_ERROR: "Proxy refused or failed the connection",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.FALLBACK_EXHAUSTED: "Every fallback candidate failed",
        ErrorCategory.UNKNOWN_ERROR: "Request failed",
        None: "",
    }
    return mapping.get(category, "Request failed")


__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "FallbackExhaustedError",
    "FallbackHttpError",
    "RequestExecutionError",
    "categorize_exception",
    "error_category_to_reason",
]
