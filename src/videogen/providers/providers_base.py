"""Abstract provider adapter definition.

Adapters translate canonical job operations into a backend's wire format and
translate the backend's answers back into canonical types. They never raise
past ``submit``/``poll``: every failure mode becomes a ``TerminalResult``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

import httpx

from ..generation.generation_models import (
    FailureReason,
    JobHandle,
    JobRequest,
    PollOutcome,
    Provider,
    TerminalResult,
)

logger = logging.getLogger(__name__)

SubmitResult = JobHandle | TerminalResult
PollResult = PollOutcome | TerminalResult


@dataclass(slots=True)
class ProviderAdapter(ABC):
    """Base interface for provider adapters bound to one credential."""

    provider: ClassVar[Provider]
    label: ClassVar[str]

    credential: str
    base_url: str
    timeout_seconds: float = 30.0
    log: logging.Logger = field(default_factory=lambda: logger)

    @abstractmethod
    def headers(self) -> dict[str, str]:
        """Return auth and content headers for every backend call."""

    @abstractmethod
    def submit_url(self) -> str:
        ...

    @abstractmethod
    def build_submit_payload(self, request: JobRequest) -> dict[str, Any]:
        """Construct the job-creation body without performing I/O."""

    @abstractmethod
    def parse_submission(self, body: Mapping[str, Any]) -> SubmitResult:
        """Map a 2xx job-creation body to a handle or an immediate result."""

    @abstractmethod
    def status_url(self, handle: JobHandle) -> str:
        ...

    @abstractmethod
    def parse_status(self, body: Mapping[str, Any]) -> PollResult:
        """Map a 2xx status body to a poll outcome."""

    async def submit(self, request: JobRequest) -> SubmitResult:
        """Create the job on the backend."""
        payload = self.build_submit_payload(request)
        self.log.info(
            "provider.submit.start",
            extra={"provider": self.provider.value, "url": self.submit_url()},
        )
        try:
            response = await self._send("POST", self.submit_url(), payload=payload)
        except httpx.HTTPError as exc:
            self.log.error(
                "provider.submit.transport_error",
                extra={"provider": self.provider.value, "error": str(exc)},
            )
            return TerminalResult.provider_error(
                f"{self.label} API request failed: {exc}",
                failure_reason=FailureReason.SUBMISSION_REJECTED,
            )

        if not _is_success(response):
            details = response.text
            self.log.warning(
                "provider.submit.rejected",
                extra={
                    "provider": self.provider.value,
                    "status_code": response.status_code,
                    "body": details,
                },
            )
            return TerminalResult.provider_error(
                f"{self.label} API request failed: {response.status_code} "
                f"{response.reason_phrase}. Details: {details}",
                http_status=response.status_code,
                failure_reason=FailureReason.SUBMISSION_REJECTED,
            )

        body = _json_object(response)
        if body is None:
            return TerminalResult.provider_error(
                f"{self.label} API returned an unreadable response",
                failure_reason=FailureReason.SUBMISSION_INVALID,
            )
        return self.parse_submission(body)

    async def poll(self, handle: JobHandle) -> PollResult:
        """Perform one status check for ``handle``."""
        try:
            response = await self._send("GET", self.status_url(handle))
        except httpx.HTTPError as exc:
            return TerminalResult.provider_error(
                f"Failed to check {self.label} job status: {exc}",
                failure_reason=FailureReason.POLL_TRANSPORT,
            )

        if not _is_success(response):
            return TerminalResult.provider_error(
                f"Failed to check {self.label} job status: {response.status_code}",
                failure_reason=FailureReason.POLL_TRANSPORT,
            )

        body = _json_object(response)
        if body is None:
            return TerminalResult.provider_error(
                f"Failed to check {self.label} job status: unreadable response",
                failure_reason=FailureReason.POLL_TRANSPORT,
            )
        return self.parse_status(body)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            if method == "POST":
                return await client.post(url, headers=self.headers(), json=payload)
            return await client.get(url, headers=self.headers())

    def no_job_id(self) -> TerminalResult:
        return TerminalResult.provider_error(
            f"{self.label} API returned no job id in response",
            failure_reason=FailureReason.SUBMISSION_INVALID,
        )

    def no_output(self) -> TerminalResult:
        return TerminalResult.provider_error(
            f"{self.label} job succeeded but returned no output",
            failure_reason=FailureReason.NO_OUTPUT,
        )


def first_url(value: Any) -> str | None:
    """Normalise an output field that is either a string or a list of them."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, (list, tuple)) and value:
        return first_url(value[0])
    return None


def _is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def _json_object(response: httpx.Response) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
