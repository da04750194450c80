"""Replicate provider adapter (predictions API)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from ..generation.generation_models import (
    JobHandle,
    JobRequest,
    PollOutcome,
    Provider,
)
from .providers_base import PollResult, ProviderAdapter, SubmitResult, first_url

SUCCEEDED_STATUSES = frozenset({"succeeded"})
FAILED_STATUSES = frozenset({"failed", "canceled"})


@dataclass(slots=True)
class ReplicateAdapter(ProviderAdapter):
    """Submit predictions to Replicate and poll them by id."""

    provider: ClassVar[Provider] = Provider.REPLICATE
    label: ClassVar[str] = "Replicate"

    base_url: str = "https://api.replicate.com/v1"
    model: str = "openai/sora-2"
    seconds: int = 8
    aspect_ratio: str = "landscape"
    openai_api_key: str | None = None

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self.credential}",
            "Content-Type": "application/json",
        }

    def submit_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/predictions"

    def status_url(self, handle: JobHandle) -> str:
        return f"{self.base_url.rstrip('/')}/predictions/{handle.provider_job_id}"

    def build_submit_payload(self, request: JobRequest) -> dict[str, Any]:
        model_input: dict[str, Any] = {
            "prompt": request.prompt,
            "seconds": self.seconds,
            "aspect_ratio": self.aspect_ratio,
        }
        # The sora-2 model on Replicate bills against a caller-owned OpenAI key.
        if self.openai_api_key:
            model_input["openai_api_key"] = self.openai_api_key
        return {"version": self.model, "input": model_input}

    def parse_submission(self, body: Mapping[str, Any]) -> SubmitResult:
        prediction_id = body.get("id")
        if not prediction_id:
            self.log.warning(
                "replicate.prediction.missing_id", extra={"fields": sorted(body)}
            )
            return self.no_job_id()
        self.log.info(
            "replicate.prediction.created",
            extra={"prediction_id": prediction_id, "status": body.get("status")},
        )
        return JobHandle(provider_job_id=str(prediction_id), provider=self.provider)

    def parse_status(self, body: Mapping[str, Any]) -> PollResult:
        status = str(body.get("status") or "").lower()
        if status in SUCCEEDED_STATUSES:
            video_url = first_url(body.get("output"))
            if video_url is None:
                urls = body.get("urls") or {}
                video_url = first_url(urls.get("get")) if isinstance(urls, dict) else None
            if video_url is None:
                self.log.warning(
                    "replicate.prediction.no_output", extra={"fields": sorted(body)}
                )
                return self.no_output()
            return PollOutcome.succeeded(video_url)
        if status in FAILED_STATUSES:
            return PollOutcome.failed(
                f"Prediction failed: {body.get('error') or 'Unknown error'}"
            )
        return PollOutcome.pending()
