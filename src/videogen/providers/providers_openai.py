"""OpenAI video generation adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from ..generation.generation_models import (
    JobHandle,
    JobRequest,
    PollOutcome,
    Provider,
    TerminalResult,
)
from .providers_base import PollResult, ProviderAdapter, SubmitResult, first_url

SUCCEEDED_STATUSES = frozenset({"completed", "succeeded"})
FAILED_STATUSES = frozenset({"failed", "cancelled"})
OPENAI_BETA = "sora-2"


@dataclass(slots=True)
class OpenAIAdapter(ProviderAdapter):
    """Submit generations to OpenAI and poll them by id.

    The generations endpoint may also answer synchronously with
    ``data[0].url``; that case is reported as an immediate result and no
    polling happens.
    """

    provider: ClassVar[Provider] = Provider.OPENAI
    label: ClassVar[str] = "OpenAI"

    base_url: str = "https://api.openai.com/v1"
    model: str = "sora-2"
    max_duration: int = 10

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credential}",
            "Content-Type": "application/json",
            "OpenAI-Beta": OPENAI_BETA,
        }

    def submit_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/video/generations"

    def status_url(self, handle: JobHandle) -> str:
        return f"{self.base_url.rstrip('/')}/video/generations/{handle.provider_job_id}"

    def build_submit_payload(self, request: JobRequest) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": request.prompt,
            "max_duration": self.max_duration,
        }

    def parse_submission(self, body: Mapping[str, Any]) -> SubmitResult:
        video_url = _video_url(body)
        if video_url is not None:
            self.log.info("openai.generation.immediate", extra={"video_url": video_url})
            return TerminalResult.video_ready(video_url)

        generation_id = body.get("id")
        if not generation_id:
            self.log.warning(
                "openai.generation.missing_id", extra={"fields": sorted(body)}
            )
            return self.no_job_id()
        self.log.info(
            "openai.generation.created",
            extra={"generation_id": generation_id, "status": body.get("status")},
        )
        return JobHandle(provider_job_id=str(generation_id), provider=self.provider)

    def parse_status(self, body: Mapping[str, Any]) -> PollResult:
        status = str(body.get("status") or "").lower()
        if status in SUCCEEDED_STATUSES:
            video_url = _video_url(body)
            if video_url is None:
                return self.no_output()
            return PollOutcome.succeeded(video_url)
        if status in FAILED_STATUSES:
            return PollOutcome.failed(f"Generation failed: {_error_message(body)}")
        return PollOutcome.pending()


def _video_url(body: Mapping[str, Any]) -> str | None:
    data = body.get("data")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        video_url = first_url(data[0].get("url"))
        if video_url is not None:
            return video_url
    return first_url(body.get("url"))


def _error_message(body: Mapping[str, Any]) -> str:
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "Unknown error")
    return str(error or "Unknown error")
