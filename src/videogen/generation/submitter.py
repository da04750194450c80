"""Job submission through a provider adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..providers.providers_base import ProviderAdapter, SubmitResult
from .arbiter import ResponseArbiter
from .generation_models import JobHandle, JobRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JobSubmitter:
    """Create the job and hand back its handle.

    An immediate terminal result (rejected submission, missing job id, or a
    backend answering synchronously) goes straight to the arbiter and no
    handle is returned.
    """

    adapter: ProviderAdapter
    log: logging.Logger = field(default_factory=lambda: logger)

    async def submit(
        self, request: JobRequest, arbiter: ResponseArbiter
    ) -> JobHandle | None:
        result: SubmitResult = await self.adapter.submit(request)
        if isinstance(result, JobHandle):
            self.log.info(
                "generation.job.submitted",
                extra={
                    "request_id": arbiter.request_id,
                    "provider": result.provider.value,
                    "provider_job_id": result.provider_job_id,
                },
            )
            return result

        self.log.info(
            "generation.job.submit_terminal",
            extra={
                "request_id": arbiter.request_id,
                "provider": request.provider.value,
                "kind": result.kind.value,
            },
        )
        arbiter.deliver(result)
        return None
