"""Timer bounding the total lifetime of a generation request."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from .arbiter import ResponseArbiter
from .generation_models import FailureReason, TerminalResult

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_MESSAGE = "Request timeout - video generation took too long"


@dataclass(slots=True)
class RequestTimeoutGuard:
    """Deliver a timeout through the arbiter when the budget elapses."""

    budget_seconds: float = 300.0
    message: str = REQUEST_TIMEOUT_MESSAGE
    _handle: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)
    _arbiter: ResponseArbiter | None = field(default=None, init=False, repr=False)
    fired: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if self.budget_seconds <= 0:
            raise ValueError("budget_seconds must be positive")

    @property
    def cancelled(self) -> bool:
        return self._handle is not None and self._handle.cancelled()

    def start(self, arbiter: ResponseArbiter) -> None:
        if self._handle is not None:
            raise RuntimeError("RequestTimeoutGuard already started")
        loop = asyncio.get_running_loop()
        self._arbiter = arbiter
        self._handle = loop.call_later(self.budget_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()

    def _fire(self) -> None:
        self.fired = True
        assert self._arbiter is not None
        if self._arbiter.delivered:
            return
        logger.warning(
            "generation.request.timeout",
            extra={
                "request_id": self._arbiter.request_id,
                "timeout_seconds": self.budget_seconds,
            },
        )
        self._arbiter.deliver(
            TerminalResult.timeout(
                self.message, failure_reason=FailureReason.REQUEST_TIMEOUT
            )
        )
