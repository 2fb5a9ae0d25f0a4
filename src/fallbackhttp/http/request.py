# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request descriptor and the single-shot execution pipeline."""

from __future__ import annotations

import copy
import logging
import shutil
import time
from contextlib import suppress
from typing import TYPE_CHECKING, Any, BinaryIO

from ..config import HttpSettings, load_http_settings
from ..errors import ConfigurationError, RequestExecutionError, categorize_exception
from .body import BodySource, FormBody, RepeatableBody
from .client import AsyncExecutionMixin, create_default_connection_provider
from .connection import Connection, ConnectionProvider, Proxy
from .headers import HeaderMap
from .response import Response
from .tls import ClientCerts
from .url import assemble_url, parse_base_url, process_placeholders, validate_placeholder

if TYPE_CHECKING:
    from ..fallback.session import FallbackSession

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
CONTENT_TYPE = "Content-Type"


class Request(AsyncExecutionMixin):
    """
    Declarative description of one HTTP call.

    Multi-valued settings are configured through chainable calls (``header``,
    ``placeholder``, ``query_param``, ``form_field``, ``body``); scalar options are
    plain attributes that may also be passed to the constructor. ``execute()`` always
    runs on a private copy, so a request can be fired repeatedly and changed between
    runs.
    """

    def __init__(
        self,
        url: str,
        method: str = "GET",
        *,
        timeout: float | None = None,
        allow_redirects: bool | None = None,
        trust_all: bool = False,
        proxy: Proxy | None = None,
        client_certs: ClientCerts | None = None,
        connection_provider: ConnectionProvider | None = None,
        settings: HttpSettings | None = None,
    ):
        self._base = parse_base_url(url)
        self.method = method.upper()
        settings = settings or load_http_settings()
        self.timeout = settings.timeout if timeout is None else timeout
        self.allow_redirects = settings.allow_redirects if allow_redirects is None else allow_redirects
        self.trust_all = trust_all
        self.proxy = proxy
        self.client_certs = client_certs
        self.connection_provider = connection_provider
        self._headers = HeaderMap()
        self._query_params: dict[str, list[str]] = {}
        self._placeholders: dict[str, str] = {}
        self._body: BodySource | None = RepeatableBody() if self.accepts_body else None

    @classmethod
    def get(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "GET", **kwargs)

    @classmethod
    def head(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "HEAD", **kwargs)

    @classmethod
    def options(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "OPTIONS", **kwargs)

    @classmethod
    def delete(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "DELETE", **kwargs)

    @classmethod
    def post(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "POST", **kwargs)

    @classmethod
    def put(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "PUT", **kwargs)

    @classmethod
    def patch(cls, url: str, **kwargs: Any) -> Request:
        return cls(url, "PATCH", **kwargs)

    @classmethod
    def form_post(cls, url: str, **kwargs: Any) -> Request:
        request = cls(url, "POST", **kwargs)
        request._body = FormBody()
        return request

    @property
    def url(self) -> str:
        return self._base.raw

    @property
    def accepts_body(self) -> bool:
        return self.method in BODY_METHODS

    # Headers

    def header(self, name: str, *values: str) -> Request:
        if name.lower() == CONTENT_TYPE.lower():
            self._reject_content_type_on_form()
        self._headers.add(name, *values)
        return self

    @property
    def headers(self) -> HeaderMap:
        return self._headers.copy()

    def content_type(self, mime_type: str, charset: str | None = None) -> Request:
        self._reject_content_type_on_form()
        value = f"{mime_type}; charset={charset}" if charset else mime_type
        self._headers.set(CONTENT_TYPE, value)
        return self

    def _reject_content_type_on_form(self) -> None:
        if isinstance(self._body, FormBody):
            raise ConfigurationError(f"Content-Type is fixed as {FormBody.content_type} for form requests")

    # Placeholders

    def placeholder(self, name: str, value: str) -> Request:
        validate_placeholder(name, value)
        self._placeholders[name] = value
        return self

    @property
    def placeholders(self) -> dict[str, str]:
        return dict(self._placeholders)

    def clear_placeholders(self) -> Request:
        self._placeholders.clear()
        return self

    def process_placeholders(self, text: str | None) -> str:
        return process_placeholders(text, self._placeholders)

    # Query parameters

    def query_param(self, name: str, *values: str) -> Request:
        self._query_params.setdefault(name.strip(), []).extend(value.strip() for value in values)
        return self

    @property
    def query_params(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._query_params.items()}

    def clear_query_params(self) -> Request:
        self._query_params.clear()
        return self

    # Body

    def body(self, data: bytes | str | BinaryIO | BodySource) -> Request:
        """Set the payload; bytes, text and one-shot streams are buffered so retries can resend them."""
        self._require_body("a request body")
        if isinstance(self._body, FormBody):
            raise ConfigurationError("Form requests are built with form_field(); body() is not allowed")
        if hasattr(data, "open") and hasattr(data, "content_type"):
            self._body = data  # type: ignore[assignment]
        else:
            self._body = RepeatableBody(data)  # type: ignore[arg-type]
        return self

    def form_field(self, name: str, *values: str) -> Request:
        self._require_body("form fields")
        if not isinstance(self._body, FormBody):
            self._headers.remove(CONTENT_TYPE)
            self._body = FormBody()
        self._body.add(name, *values)
        return self

    @property
    def form_fields(self) -> dict[str, list[str]]:
        if isinstance(self._body, FormBody):
            return {name: list(values) for name, values in self._body.fields.items()}
        return {}

    def clear_form_fields(self) -> Request:
        if isinstance(self._body, FormBody):
            self._body.clear()
        return self

    @property
    def body_source(self) -> BodySource | None:
        return self._body

    def _require_body(self, what: str) -> None:
        if not self.accepts_body:
            raise ConfigurationError(f"{self.method} requests cannot carry {what}")

    # Execution

    def assemble_url(self) -> str:
        return assemble_url(self._base, self._query_params, self._placeholders)

    def copy(self) -> Request:
        clone = copy.copy(self)
        clone._headers = self._headers.copy()
        clone._query_params = self.query_params
        clone._placeholders = dict(self._placeholders)
        if isinstance(self._body, FormBody):
            clone._body = self._body.copy()
        return clone

    def execute(self) -> Response:
        """Send the request and block until status and headers are available."""
        request = self.copy()
        started_at = time.monotonic()
        url = request.assemble_url()
        provider = request.connection_provider or create_default_connection_provider()
        connection: Connection | None = None
        logger.debug("Requesting %s %s", request.method, url)
        try:
            connection = provider.open(url, request.proxy)
            request._configure(connection)
            if request._base.secure:
                request._configure_secure(connection)
            if request.accepts_body:
                request._write_body(connection)
            return Response.from_connection(request, connection, started_at)
        except Exception as exc:
            if connection is not None:
                with suppress(Exception):
                    connection.disconnect()
            raise RequestExecutionError(
                f"{request.method} {url} failed: {exc}",
                category=categorize_exception(exc),
            ) from exc

    def execute_attempt(self, session: FallbackSession) -> Response:
        logger.debug("Attempt no. %s: %s", session.describe(), self)
        return self.execute()

    def _configure(self, connection: Connection) -> None:
        connection.method = self.method
        if self._body is not None and self._body.content_type:
            if isinstance(self._body, FormBody) or CONTENT_TYPE not in self._headers:
                self._headers.set(CONTENT_TYPE, self._body.content_type)
        for entry in self._headers:
            connection.set_header(self.process_placeholders(entry.name), self.process_placeholders(entry.joined()))
        connection.follow_redirects = self.allow_redirects
        connection.connect_timeout = self.timeout

    def _configure_secure(self, connection: Any) -> None:
        context = self.client_certs.ssl_context() if self.client_certs is not None else None
        if self.trust_all:
            # A caller-supplied context may be shared; its verification settings stay as they are.
            if context is not None and self.client_certs.prebuilt:
                logger.warning("trust_all ignored for %s: a prebuilt SSLContext keeps its own verification", self)
            else:
                connection.trust_all_hosts()
        if context is not None:
            connection.use_ssl_context(context)

    def _write_body(self, connection: Connection) -> None:
        source = self._body if self._body is not None else RepeatableBody()
        if isinstance(source, FormBody):
            source = source.render(self.process_placeholders)
        connection.output_enabled = True
        with connection.output_stream() as output, source.open() as payload:
            shutil.copyfileobj(payload, output)

    def __repr__(self) -> str:
        return f"{self.method} {self.url}"


__all__ = ["BODY_METHODS", "Request"]
