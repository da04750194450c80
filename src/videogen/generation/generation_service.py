"""Domain service coordinating one video generation request."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog

from ..config import AppConfig
from ..providers.providers_base import ProviderAdapter
from ..providers.providers_factory import create_adapter
from .arbiter import ResponseArbiter
from .generation_errors import (
    CredentialMissingError,
    PromptMissingError,
    UnsupportedProviderError,
)
from .generation_models import FailureReason, JobRequest, Provider, TerminalResult
from .poller import JobPoller
from .submitter import JobSubmitter
from .timeout_guard import RequestTimeoutGuard

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[Provider, str], ProviderAdapter]

PROVIDER_LABELS = {Provider.REPLICATE: "Replicate", Provider.OPENAI: "OpenAI"}


def mask_secret(secret: str, visible: int = 4) -> str:
    if not secret:
        return ""
    return secret[:visible] + "..."


@dataclass(slots=True)
class GenerationService:
    """Runs submit, poll and the request timeout for each caller request.

    Every request gets its own arbiter, guard and poller; nothing mutable is
    shared between requests. Background job tasks are kept referenced until
    they finish, so an in-flight status call that loses the race can complete
    quietly after the caller has been answered.
    """

    config: AppConfig
    adapter_factory: AdapterFactory | None = None
    sleep: Callable[[float], Any] | None = None
    log: logging.Logger = field(default_factory=lambda: logger)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False, repr=False)

    @property
    def active_jobs(self) -> int:
        """Number of job tasks that have not finished yet."""
        return len(self._tasks)

    def build_request(
        self, prompt: str | None, provider: str | None, api_key: str | None = None
    ) -> JobRequest:
        """Validate caller input and resolve the credential."""
        if not prompt or not prompt.strip():
            raise PromptMissingError("Prompt is required")

        try:
            selected = Provider((provider or Provider.REPLICATE.value).strip().lower())
        except ValueError:
            raise UnsupportedProviderError(f"Unsupported provider '{provider}'") from None

        credential = (api_key or "").strip() or self.config.default_credential(selected)
        if not credential:
            raise CredentialMissingError(
                f"{PROVIDER_LABELS[selected]} API key not configured"
            )
        return JobRequest(prompt=prompt, provider=selected, credential=credential)

    async def generate(self, request: JobRequest) -> TerminalResult:
        """Run the job and return the single terminal result."""
        request_id = uuid.uuid4().hex
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            return await self._generate(request, request_id)

    async def _generate(self, request: JobRequest, request_id: str) -> TerminalResult:
        started_at = datetime.utcnow()
        self.log.info(
            "generation.request.received",
            extra={
                "request_id": request_id,
                "provider": request.provider.value,
                "prompt": request.prompt,
                "credential": mask_secret(request.credential),
            },
        )

        adapter = self._create_adapter(request)
        arbiter = ResponseArbiter(request_id=request_id)
        guard = RequestTimeoutGuard(budget_seconds=self.config.request_timeout_seconds)
        poller = JobPoller(
            adapter,
            poll_interval_seconds=self.config.poll_interval_seconds,
            max_attempts=self.config.max_poll_attempts,
            sleep=self.sleep,
        )
        arbiter.add_done_callback(lambda _result: guard.cancel())
        arbiter.add_done_callback(lambda _result: poller.stop())

        guard.start(arbiter)
        task = asyncio.create_task(
            self._drive(request, adapter, poller, arbiter),
            name=f"videogen-job-{request_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        try:
            result = await arbiter.wait()
        finally:
            guard.cancel()
            poller.stop()

        duration = (datetime.utcnow() - started_at).total_seconds()
        self.log.info(
            "generation.request.completed",
            extra={
                "request_id": request_id,
                "provider": request.provider.value,
                "kind": result.kind.value,
                "http_status": result.http_status,
                "poll_attempts": poller.attempts,
                "duration_seconds": duration,
            },
        )
        return result

    async def aclose(self) -> None:
        """Wait for background job tasks still finishing an in-flight call."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _create_adapter(self, request: JobRequest) -> ProviderAdapter:
        if self.adapter_factory is not None:
            return self.adapter_factory(request.provider, request.credential)
        return create_adapter(
            request.provider, credential=request.credential, config=self.config
        )

    async def _drive(
        self,
        request: JobRequest,
        adapter: ProviderAdapter,
        poller: JobPoller,
        arbiter: ResponseArbiter,
    ) -> None:
        try:
            handle = await JobSubmitter(adapter).submit(request, arbiter)
            if handle is None or arbiter.delivered:
                return
            await poller.run(handle, arbiter)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.log.exception(
                "generation.job.unexpected_error",
                extra={"request_id": arbiter.request_id, "provider": request.provider.value},
            )
            arbiter.deliver(
                TerminalResult.provider_error(
                    f"Unexpected error while generating video: {exc}",
                    failure_reason=FailureReason.INTERNAL_ERROR,
                )
            )
