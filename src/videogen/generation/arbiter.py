"""Exactly-once delivery of a request's terminal result.

Several activities race to finish a request: the poller reaching a terminal
state, the submitter failing immediately and the request timeout guard
firing. ``ResponseArbiter`` is the only place that decides which of them
produces the caller-visible response. The first ``deliver`` call wins; every
later call is a no-op that returns ``False``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from .generation_models import TerminalResult

logger = logging.getLogger(__name__)

DoneCallback = Callable[[TerminalResult], None]


class ResponseArbiter:
    """Request-scoped one-shot cell holding the delivered result."""

    def __init__(
        self,
        *,
        request_id: str | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.request_id = request_id
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[TerminalResult] = self._loop.create_future()
        self._lock = threading.Lock()
        self._delivered = False
        self._result: TerminalResult | None = None
        self._callbacks: list[DoneCallback] = []

    @property
    def delivered(self) -> bool:
        return self._delivered

    @property
    def result(self) -> TerminalResult | None:
        return self._result

    def deliver(self, result: TerminalResult) -> bool:
        """Record ``result`` if nothing was delivered yet.

        Safe to call from any thread. Returns ``True`` for the winning call.
        """
        with self._lock:
            if self._delivered:
                won = False
            else:
                self._delivered = True
                self._result = result
                won = True

        if not won:
            logger.debug(
                "generation.arbiter.discarded",
                extra={"request_id": self.request_id, "kind": result.kind.value},
            )
            return False

        logger.info(
            "generation.arbiter.delivered",
            extra={
                "request_id": self.request_id,
                "kind": result.kind.value,
                "http_status": result.http_status,
                "failure_reason": (
                    result.failure_reason.value if result.failure_reason else None
                ),
            },
        )
        if self._in_loop_thread():
            self._resolve()
        else:
            self._loop.call_soon_threadsafe(self._resolve)
        return True

    def add_done_callback(self, callback: DoneCallback) -> None:
        """Run ``callback`` once with the winning result.

        Callbacks registered after delivery are scheduled immediately.
        """
        with self._lock:
            if not self._future.done():
                self._callbacks.append(callback)
                return
        self._loop.call_soon(callback, self._future.result())

    async def wait(self) -> TerminalResult:
        """Block until a result is delivered and return it."""
        return await asyncio.shield(self._future)

    def _resolve(self) -> None:
        assert self._result is not None
        with self._lock:
            if self._future.done():
                return
            self._future.set_result(self._result)
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self._result)
            except Exception:
                logger.exception(
                    "generation.arbiter.callback_failed",
                    extra={"request_id": self.request_id},
                )

    def _in_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False
