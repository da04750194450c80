"""Bounded status polling for submitted jobs."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from ..providers.providers_base import ProviderAdapter
from .arbiter import ResponseArbiter
from .generation_models import (
    FailureReason,
    JobHandle,
    PollOutcome,
    PollStatus,
    TerminalResult,
)


class PollerState(StrEnum):
    POLLING = "polling"
    DONE = "done"


class JobPoller:
    """Poll a job at a fixed interval until it ends or attempts run out.

    Every terminal decision is delivered through the arbiter. A failed status
    call ends the request; it is not retried on the next tick.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        *,
        poll_interval_seconds: float = 10.0,
        max_attempts: int = 30,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        self.adapter = adapter
        self.poll_interval_seconds = poll_interval_seconds
        self.max_attempts = max_attempts
        self.state = PollerState.POLLING
        self.attempts = 0
        self._sleep = self._wrap_sleep(sleep)
        self._tick: asyncio.Future[None] | None = None
        self._stopped = False
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _wrap_sleep(
        sleep: Callable[[float], Any] | None,
    ) -> Callable[[float], Awaitable[None]]:
        if sleep is None:
            return asyncio.sleep

        async def _async_sleep(seconds: float) -> None:
            result = sleep(seconds)
            if inspect.isawaitable(result):
                await result

        return _async_sleep

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Cancel the pending tick; an in-flight status call may still finish."""
        self._stopped = True
        self.state = PollerState.DONE
        if self._tick is not None and not self._tick.done():
            self._tick.cancel()

    async def run(
        self, handle: JobHandle, arbiter: ResponseArbiter
    ) -> TerminalResult | None:
        """Drive the loop; return the delivered result, or ``None`` if stopped."""
        self._logger.info(
            "generation.poll.start",
            extra={
                "request_id": arbiter.request_id,
                "provider_job_id": handle.provider_job_id,
                "max_attempts": self.max_attempts,
                "interval_seconds": self.poll_interval_seconds,
            },
        )
        while not self._stopped:
            if self.attempts >= self.max_attempts:
                self._logger.warning(
                    "generation.poll.exhausted",
                    extra={
                        "request_id": arbiter.request_id,
                        "provider_job_id": handle.provider_job_id,
                        "attempts": self.attempts,
                    },
                )
                return self._finish(
                    arbiter,
                    TerminalResult.timeout(
                        f"Video generation timed out after {self.attempts} "
                        "polling attempts",
                        failure_reason=FailureReason.POLL_EXHAUSTED,
                    ),
                )

            if not await self._wait_tick():
                return None
            self.attempts += 1
            outcome = await self.adapter.poll(handle)
            if self._stopped:
                return None

            self._logger.info(
                "generation.poll.attempt",
                extra={
                    "request_id": arbiter.request_id,
                    "provider_job_id": handle.provider_job_id,
                    "attempt": self.attempts,
                    "max_attempts": self.max_attempts,
                    "status": (
                        outcome.status.value
                        if isinstance(outcome, PollOutcome)
                        else outcome.kind.value
                    ),
                },
            )

            if isinstance(outcome, TerminalResult):
                return self._finish(arbiter, outcome)
            if outcome.status is PollStatus.SUCCEEDED:
                assert outcome.video_url is not None
                return self._finish(arbiter, TerminalResult.video_ready(outcome.video_url))
            if outcome.status is PollStatus.FAILED:
                return self._finish(
                    arbiter,
                    TerminalResult.provider_error(
                        outcome.reason or "Unknown error",
                        failure_reason=FailureReason.JOB_FAILED,
                    ),
                )
        return None

    async def _wait_tick(self) -> bool:
        self._tick = asyncio.ensure_future(self._sleep(self.poll_interval_seconds))
        try:
            await self._tick
        except asyncio.CancelledError:
            if self._stopped and self._tick.cancelled():
                return False
            raise
        finally:
            self._tick = None
        return not self._stopped

    def _finish(
        self, arbiter: ResponseArbiter, result: TerminalResult
    ) -> TerminalResult:
        self.state = PollerState.DONE
        arbiter.deliver(result)
        return result
