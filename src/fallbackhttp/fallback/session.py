# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Attempt bookkeeping for one top-level fallback execution."""

from __future__ import annotations

import threading


class FallbackSession:
    """
    Nested attempt numbering shared by a fallback plan and every plan nested in it.

    ``groups`` holds one counter per plan level, outermost first; each counter is the
    1-based index of the entry being tried at that level. ``attempt_no`` restarts
    at zero whenever a plan level is entered and otherwise keeps counting across
    entries.
    """

    def __init__(self) -> None:
        self.groups: list[int] = []
        self.attempt_no = 0
        self._wakeup = threading.Event()

    def begin_plan(self) -> None:
        self.groups.append(0)
        self.attempt_no = 0

    def end_plan(self) -> None:
        self.groups.pop()

    def next_entry(self) -> None:
        self.groups[-1] += 1

    def next_attempt(self) -> int:
        self.attempt_no += 1
        return self.attempt_no

    def describe(self) -> str:
        """``"2.1 (3)"``: group counters joined by dots, then the attempt number."""
        return ".".join(str(group) for group in self.groups) + f" ({self.attempt_no})"

    def wait(self, millis: float) -> None:
        """
        Block for ``millis`` milliseconds; ``interrupt()`` from another thread cuts the wait short.

        Only a wait in progress reacts: an interrupt sent between waits is discarded.
        """
        if millis <= 0:
            return
        self._wakeup.clear()
        self._wakeup.wait(millis / 1000.0)
        self._wakeup.clear()

    def interrupt(self) -> None:
        self._wakeup.set()

    def __repr__(self) -> str:
        return f"FallbackSession({self.describe()})"


__all__ = ["FallbackSession"]
