# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL parsing, placeholder substitution and query assembly."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..errors import ConfigurationError

PLACEHOLDER_OPEN = "{"
PLACEHOLDER_CLOSE = "}"


@dataclass(frozen=True)
class BaseUrl:
    """The pieces of a request URL that survive assembly (user-info and fragment do not)."""

    raw: str
    scheme: str
    host: str
    port: int | None
    path: str
    query: str

    @property
    def secure(self) -> bool:
        return self.scheme == "https"


def parse_base_url(url: str) -> BaseUrl:
    """Split ``url`` or raise ConfigurationError when it has no scheme, host or a bad port."""
    raw = str(url or "").strip()
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as exc:
        raise ConfigurationError(f"Malformed URL {raw!r}: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(f"Malformed URL {raw!r}: scheme and host are required")

    # Keep the host as written; urlsplit().hostname lower-cases placeholder tokens.
    host = parts.netloc.rpartition("@")[2]
    if port is not None:
        host = host[: host.rfind(":")]
    if not host:
        raise ConfigurationError(f"Malformed URL {raw!r}: empty host")
    return BaseUrl(
        raw=raw,
        scheme=parts.scheme.lower(),
        host=host,
        port=port,
        path=parts.path,
        query=parts.query,
    )


def validate_placeholder(name: str, value: str) -> None:
    for item in (name, value):
        if PLACEHOLDER_OPEN in item or PLACEHOLDER_CLOSE in item:
            raise ConfigurationError("Placeholders may not contain curly brace {} characters")


def process_placeholders(text: str | None, placeholders: Mapping[str, str]) -> str:
    """
    Replace every ``{name}`` token with its configured value.

    Placeholders are applied one after another in mapping order. Each token is
    replaced until none of it remains in the text.
    """
    result = text or ""
    for name, value in placeholders.items():
        token = f"{PLACEHOLDER_OPEN}{name}{PLACEHOLDER_CLOSE}"
        while token in result:
            result = result.replace(token, value)
    return result


def build_query(literal: str | None, params: Mapping[str, list[str]]) -> str:
    """Literal query first, then ``name=value`` for each configured value, joined by ``&``."""
    pieces: list[str] = []
    if literal:
        pieces.append(literal)
    for name, values in params.items():
        pieces.extend(f"{name}={value}" for value in values)
    return "&".join(pieces)


def assemble_url(base: BaseUrl, params: Mapping[str, list[str]], placeholders: Mapping[str, str]) -> str:
    host = process_placeholders(base.host, placeholders)
    path = process_placeholders(base.path, placeholders)
    query = process_placeholders(build_query(base.query, params), placeholders)

    url = f"{base.scheme}://{host}"
    if base.port is not None:
        url += f":{base.port}"
    url += path
    if query:
        url += f"?{query}"
    return url


__all__ = [
    "BaseUrl",
    "assemble_url",
    "build_query",
    "parse_base_url",
    "process_placeholders",
    "validate_placeholder",
]
