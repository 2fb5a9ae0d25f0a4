# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client certificate material for mutual TLS."""

from __future__ import annotations

import logging
import os
import ssl
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientCerts:
    """
    A client certificate chain and private key, or a prebuilt SSLContext.

    ``ssl_context()`` never raises: unreadable or mismatched material is logged and
    reported as ``None`` so the request proceeds without a client certificate.
    PEM material yields a fresh context on every call; a prebuilt context is returned
    as is and must not be modified by connections.
    """

    certfile: str | None = None
    keyfile: str | None = None
    password: str | None = None
    context: ssl.SSLContext | None = None

    @classmethod
    def from_pem(cls, certfile: str | os.PathLike[str], keyfile: str | os.PathLike[str] | None = None, password: str | None = None) -> ClientCerts:
        return cls(
            certfile=os.fspath(certfile),
            keyfile=os.fspath(keyfile) if keyfile is not None else None,
            password=password,
        )

    @classmethod
    def from_ssl_context(cls, context: ssl.SSLContext) -> ClientCerts:
        return cls(context=context)

    @property
    def prebuilt(self) -> bool:
        return self.context is not None

    def ssl_context(self) -> ssl.SSLContext | None:
        if self.context is not None:
            return self.context
        if not self.certfile:
            return None
        try:
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
            context.load_cert_chain(self.certfile, keyfile=self.keyfile, password=self.password)
        except (OSError, ssl.SSLError, ValueError) as exc:
            logger.warning("Could not load client certificate %s: %s", self.certfile, exc)
            return None
        return context

    def __repr__(self) -> str:
        if self.context is not None:
            return "ClientCerts(context=<SSLContext>)"
        return f"ClientCerts(certfile={self.certfile!r}, keyfile={self.keyfile!r})"


__all__ = ["ClientCerts"]
