# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Case-insensitive header multimap.

HTTP header field names are case-insensitive (RFC 9110). Entries are keyed by the
lower-cased name, while the casing first supplied by the caller is kept for
transmission. Repeated additions accumulate values in insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class HeaderValues:
    """All values of one header, under its original name."""

    name: str
    values: list[str] = field(default_factory=list)

    def add(self, *values: str) -> None:
        self.values.extend(values)

    def joined(self) -> str:
        return ", ".join(self.values)

    def first(self) -> str | None:
        return self.values[0] if self.values else None

    def copy(self) -> HeaderValues:
        return HeaderValues(self.name, list(self.values))


def _coerce_fields(fields: Any) -> Iterable[tuple[object, object]]:
    """
    Best-effort flattening of header containers into ``(name, value)`` pairs.

    Accepts mappings of name to a value or to a list of values, objects with
    ``multi_items()`` (httpx.Headers) or ``items()``, and iterables of pairs.
    """
    if not fields:
        return []
    multi_items = getattr(fields, "multi_items", None)
    if callable(multi_items):
        return list(multi_items())
    if isinstance(fields, Mapping):
        pairs: list[tuple[object, object]] = []
        for key, value in fields.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((key, item) for item in value)
            else:
                pairs.append((key, value))
        return pairs
    return list(fields)


class HeaderMap:
    """Insertion-ordered, case-insensitive multimap of headers."""

    def __init__(self, fields: Any = None):
        self._entries: dict[str, HeaderValues] = {}
        for name, value in _coerce_fields(fields):
            # Status lines surface as a None-named field on some connections.
            if name is None:
                continue
            self.add(str(name), "" if value is None else str(value))

    def add(self, name: str, *values: str) -> None:
        lookup = name.lower()
        entry = self._entries.get(lookup)
        if entry is None:
            entry = HeaderValues(name)
            self._entries[lookup] = entry
        entry.add(*values)

    def set(self, name: str, *values: str) -> None:
        self._entries[name.lower()] = HeaderValues(name, list(values))

    def get(self, name: str) -> HeaderValues | None:
        return self._entries.get(name.lower())

    def value(self, name: str, default: str = "") -> str:
        """Return the joined values of ``name``, or ``default`` when absent."""
        entry = self.get(name)
        return default if entry is None else entry.joined()

    def remove(self, name: str) -> None:
        self._entries.pop(name.lower(), None)

    def keys(self) -> list[str]:
        return list(self._entries)

    def copy(self) -> HeaderMap:
        clone = HeaderMap()
        clone._entries = {key: entry.copy() for key, entry in self._entries.items()}
        return clone

    def to_dict(self) -> dict[str, list[str]]:
        return {entry.name: list(entry.values) for entry in self._entries.values()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[HeaderValues]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"HeaderMap({self.to_dict()!r})"


__all__ = ["HeaderMap", "HeaderValues"]
