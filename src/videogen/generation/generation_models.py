"""Data structures for the video generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Provider(StrEnum):
    """Generation backends the proxy can submit jobs to."""

    REPLICATE = "replicate"
    OPENAI = "openai"


class PollStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TerminalKind(StrEnum):
    """Kinds of results that end a request."""

    VIDEO_READY = "video_ready"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"


class FailureReason(StrEnum):
    """Failure reasons attached to terminal results for logging."""

    SUBMISSION_REJECTED = "submission_rejected"
    SUBMISSION_INVALID = "submission_invalid"
    POLL_TRANSPORT = "poll_transport"
    JOB_FAILED = "job_failed"
    NO_OUTPUT = "no_output"
    POLL_EXHAUSTED = "poll_exhausted"
    REQUEST_TIMEOUT = "request_timeout"
    INTERNAL_ERROR = "internal_error"


@dataclass(slots=True, frozen=True)
class JobRequest:
    """Canonical job request built by the caller-facing layer."""

    prompt: str
    provider: Provider
    credential: str


@dataclass(slots=True, frozen=True)
class JobHandle:
    """Reference to a job accepted by a provider."""

    provider_job_id: str
    provider: Provider


@dataclass(slots=True, frozen=True)
class PollOutcome:
    """Interpretation of a single status check."""

    status: PollStatus
    video_url: str | None = None
    reason: str | None = None

    @classmethod
    def pending(cls) -> "PollOutcome":
        return cls(status=PollStatus.PENDING)

    @classmethod
    def succeeded(cls, video_url: str) -> "PollOutcome":
        return cls(status=PollStatus.SUCCEEDED, video_url=video_url)

    @classmethod
    def failed(cls, reason: str) -> "PollOutcome":
        return cls(status=PollStatus.FAILED, reason=reason)


@dataclass(slots=True, frozen=True)
class TerminalResult:
    """Result delivered to the caller exactly once per request.

    ``http_status`` is the status the caller-facing layer responds with:
    200 for ``VIDEO_READY``, 408 for ``TIMEOUT`` and either the upstream
    status (submission-time errors) or 500 for ``PROVIDER_ERROR``.
    """

    kind: TerminalKind
    http_status: int
    video_url: str | None = None
    message: str | None = None
    failure_reason: FailureReason | None = None

    @classmethod
    def video_ready(cls, video_url: str) -> "TerminalResult":
        return cls(kind=TerminalKind.VIDEO_READY, http_status=200, video_url=video_url)

    @classmethod
    def provider_error(
        cls,
        message: str,
        *,
        http_status: int = 500,
        failure_reason: FailureReason = FailureReason.JOB_FAILED,
    ) -> "TerminalResult":
        return cls(
            kind=TerminalKind.PROVIDER_ERROR,
            http_status=http_status,
            message=message,
            failure_reason=failure_reason,
        )

    @classmethod
    def timeout(
        cls,
        message: str,
        *,
        failure_reason: FailureReason = FailureReason.REQUEST_TIMEOUT,
    ) -> "TerminalResult":
        return cls(
            kind=TerminalKind.TIMEOUT,
            http_status=408,
            message=message,
            failure_reason=failure_reason,
        )

    @property
    def is_success(self) -> bool:
        return self.kind is TerminalKind.VIDEO_READY
