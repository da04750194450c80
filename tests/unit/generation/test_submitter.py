from __future__ import annotations

import pytest

from src.videogen.generation.arbiter import ResponseArbiter
from src.videogen.generation.generation_models import (
    FailureReason,
    JobHandle,
    JobRequest,
    Provider,
    TerminalResult,
)
from src.videogen.generation.submitter import JobSubmitter
from tests.mocks.adapters import ScriptedAdapter

pytestmark = pytest.mark.unit

REQUEST = JobRequest(
    prompt="cat on a skateboard", provider=Provider.REPLICATE, credential="r8_key"
)


@pytest.mark.asyncio
async def test_submit_returns_handle_without_delivery() -> None:
    handle = JobHandle(provider_job_id="abc123", provider=Provider.REPLICATE)
    adapter = ScriptedAdapter(submit_result=handle)
    arbiter = ResponseArbiter()

    result = await JobSubmitter(adapter).submit(REQUEST, arbiter)  # type: ignore[arg-type]

    assert result == handle
    assert adapter.submitted == [REQUEST]
    assert not arbiter.delivered


@pytest.mark.asyncio
async def test_rejected_submission_is_delivered_directly() -> None:
    rejected = TerminalResult.provider_error(
        "Replicate API request failed: 401 Unauthorized. Details: invalid token",
        http_status=401,
        failure_reason=FailureReason.SUBMISSION_REJECTED,
    )
    adapter = ScriptedAdapter(submit_result=rejected)
    arbiter = ResponseArbiter()

    result = await JobSubmitter(adapter).submit(REQUEST, arbiter)  # type: ignore[arg-type]

    assert result is None
    assert await arbiter.wait() == rejected


@pytest.mark.asyncio
async def test_synchronous_backend_answer_is_delivered_directly() -> None:
    ready = TerminalResult.video_ready("https://cdn/instant.mp4")
    adapter = ScriptedAdapter(submit_result=ready, provider=Provider.OPENAI)
    arbiter = ResponseArbiter()

    result = await JobSubmitter(adapter).submit(REQUEST, arbiter)  # type: ignore[arg-type]

    assert result is None
    assert await arbiter.wait() == ready
    assert adapter.poll_calls == 0
