# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

from fallbackhttp import runtime
from fallbackhttp.config import HttpSettings
from fallbackhttp.errors import FallbackExhaustedError, RequestExecutionError
from fallbackhttp.fallback.plan import FallbackRequest
from fallbackhttp.http.adapters import StubConnectionProvider, StubReply
from fallbackhttp.http.request import Request


class TestAsyncExecution(unittest.TestCase):
    def setUp(self):
        self.executor = ThreadPoolExecutor(max_workers=2)

    def tearDown(self):
        self.executor.shutdown(wait=True)
        runtime.shutdown_default_executor()

    def _request(self, *replies):
        return Request("http://example", connection_provider=StubConnectionProvider(list(replies)))

    def test_submit_resolves_to_response(self):
        future = self._request(StubReply(body=b"async")).submit(self.executor)
        response = future.result(timeout=5)
        self.assertEqual(response.body_as_string(), "async")

    def test_submit_propagates_execution_error(self):
        future = self._request(ConnectionRefusedError("down")).submit(self.executor)
        with self.assertRaises(RequestExecutionError):
            future.result(timeout=5)

    def test_execute_async_calls_success_callback_only(self):
        done = threading.Event()
        outcomes = []

        def on_success(response):
            outcomes.append(("ok", response.status_code, threading.current_thread().name))
            done.set()

        def on_error(exc):
            outcomes.append(("error", exc))
            done.set()

        self._request(StubReply(status_code=202, reason="Accepted")).execute_async(on_success, on_error, self.executor)

        self.assertTrue(done.wait(5))
        self.assertEqual(len(outcomes), 1)
        kind, status, thread_name = outcomes[0]
        self.assertEqual((kind, status), ("ok", 202))
        self.assertNotEqual(thread_name, threading.current_thread().name)

    def test_execute_async_calls_error_callback_for_fallback_plan(self):
        done = threading.Event()
        errors = []

        plan = FallbackRequest().try_request(self._request(TimeoutError("slow")))
        plan.execute_async(lambda response: done.set(), lambda exc: (errors.append(exc), done.set()), self.executor)

        self.assertTrue(done.wait(5))
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], FallbackExhaustedError)

    def test_default_executor_is_shared_and_restartable(self):
        runtime.shutdown_default_executor()
        first = runtime.get_default_executor(HttpSettings(max_workers=2))
        self.assertIs(runtime.get_default_executor(), first)

        response = self._request(StubReply(body=b"pooled")).submit().result(timeout=5)
        self.assertEqual(response.body_as_bytes(), b"pooled")

        runtime.shutdown_default_executor()
        second = runtime.get_default_executor()
        self.assertIsNot(second, first)


if __name__ == "__main__":
    unittest.main()
