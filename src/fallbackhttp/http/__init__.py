# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response exports."""

from .adapters import StubConnection, StubConnectionProvider, StubReply
from .body import FORM_CONTENT_TYPE, BodySource, FormBody, RepeatableBody
from .client import AsyncExecutionMixin, Executable, create_default_connection_provider
from .connection import Connection, ConnectionProvider, Proxy, SecureConnection
from .headers import HeaderMap, HeaderValues
from .httpx_client import HttpxConnection, HttpxConnectionProvider
from .request import BODY_METHODS, Request
from .response import Response
from .retry import BackoffStrategy, RetryStrategy
from .stream import CloseObservingStream
from .tls import ClientCerts
from .url import assemble_url, parse_base_url, process_placeholders

__all__ = [
    "BODY_METHODS",
    "FORM_CONTENT_TYPE",
    "AsyncExecutionMixin",
    "BackoffStrategy",
    "BodySource",
    "ClientCerts",
    "CloseObservingStream",
    "Connection",
    "ConnectionProvider",
    "Executable",
    "FormBody",
    "HeaderMap",
    "HeaderValues",
    "HttpxConnection",
    "HttpxConnectionProvider",
    "Proxy",
    "RepeatableBody",
    "Request",
    "Response",
    "RetryStrategy",
    "SecureConnection",
    "StubConnection",
    "StubConnectionProvider",
    "StubReply",
    "assemble_url",
    "create_default_connection_provider",
    "parse_base_url",
    "process_placeholders",
]
