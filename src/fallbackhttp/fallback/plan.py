# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fallback plans: ordered candidates with per-candidate retry and backoff."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import FallbackExhaustedError, RequestExecutionError, categorize_exception
from ..http.client import AsyncExecutionMixin
from ..http.retry import BackoffStrategy, RetryStrategy
from .session import FallbackSession

if TYPE_CHECKING:
    from ..http.client import Executable
    from ..http.response import Response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanEntry:
    """One candidate of a plan and the policies that govern its attempts."""

    request: Executable
    retry_on_error_response: bool = False
    retry: RetryStrategy = field(default_factory=lambda: RetryStrategy.max_total_tries(1))
    backoff: BackoffStrategy = field(default_factory=BackoffStrategy.none)

    def accepts(self, response: Response) -> bool:
        return not self.retry_on_error_response or response.status_code < 400


class FallbackRequest(AsyncExecutionMixin):
    """
    Tries each entry in order until one succeeds.

    An entry fails when executing it raises, or when ``retry_on_error_response`` is set
    and the status is 400 or above. A failed entry is retried while its retry policy
    allows, waiting its backoff delay between attempts, then the next entry is tried.
    The first success is returned as is; when every entry is exhausted a
    FallbackExhaustedError is raised, chained to the last exception seen.

    Entries may be FallbackRequests themselves. Nested plans share the caller's
    FallbackSession so attempts are numbered within the enclosing plan.
    """

    def __init__(self) -> None:
        self._entries: list[PlanEntry] = []

    def try_request(
        self,
        request: Executable,
        retry_on_error_response: bool = False,
        retry: RetryStrategy | None = None,
        backoff: BackoffStrategy | None = None,
    ) -> FallbackRequest:
        self._entries.append(
            PlanEntry(
                request=request,
                retry_on_error_response=retry_on_error_response,
                retry=retry or RetryStrategy.max_total_tries(1),
                backoff=backoff or BackoffStrategy.none(),
            )
        )
        return self

    @property
    def entries(self) -> list[PlanEntry]:
        return list(self._entries)

    def execute(self) -> Response:
        return self.execute_attempt(FallbackSession())

    def execute_attempt(self, session: FallbackSession) -> Response:
        last_response: Response | None = None
        last_error: Exception | None = None
        session.begin_plan()
        try:
            for entry in self._entries:
                session.next_entry()
                while True:
                    session.next_attempt()
                    try:
                        response = entry.request.execute_attempt(session)
                    except Exception as exc:  # noqa: BLE001
                        if not isinstance(entry.request, FallbackRequest):
                            logger.warning("%s: attempt %s failed", entry.request, session.describe(), exc_info=True)
                        last_error = exc
                    else:
                        if entry.accepts(response):
                            return response
                        logger.debug(
                            "%s: error response (status %s) with retry_on_error_response set",
                            entry.request,
                            response.status_code,
                        )
                        try:
                            response.body_as_bytes()
                        except Exception as exc:  # noqa: BLE001
                            logger.warning(
                                "%s: reading error response failed at attempt %s",
                                entry.request,
                                session.describe(),
                                exc_info=True,
                            )
                            last_error = _drain_error(response, exc)
                        else:
                            last_response = response
                        finally:
                            response.release()

                    # Nested plans renumber attempts on the shared session.
                    attempt_no = session.attempt_no
                    retry = entry.retry.should_retry(attempt_no)
                    logger.debug("Retry decision after attempt %s: %s", session.describe(), retry)
                    if not retry:
                        break
                    delay = entry.backoff.delay(attempt_no)
                    if delay > 0:
                        logger.debug("Backing off for %.0f ms", delay)
                        session.wait(delay)
            attempt = session.describe()
        finally:
            session.end_plan()

        logger.debug("Fallback plan exhausted at attempt %s", attempt)
        message = f"All {len(self._entries)} fallback entries failed (last attempt {attempt})"
        if last_error is not None:
            raise FallbackExhaustedError(
                f"{message}: {last_error}", last_response=last_response, attempt=attempt
            ) from last_error
        raise FallbackExhaustedError(message, last_response=last_response, attempt=attempt)

    def __repr__(self) -> str:
        return f"FallbackRequest({len(self._entries)} entries)"


def _drain_error(response: Response, exc: Exception) -> RequestExecutionError:
    error = RequestExecutionError(
        f"Reading {response.status_code} response body failed: {exc}",
        category=categorize_exception(exc),
    )
    error.__cause__ = exc
    return error


__all__ = ["FallbackRequest", "PlanEntry"]
