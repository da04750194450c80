from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

import pytest

from src.videogen.api.errors import (
    ApiError,
    api_error_handler,
    request_validation_error_handler,
)
from src.videogen.config import AppConfig, ReplicateSettings
from src.videogen.generation.generation_api import router
from src.videogen.generation.generation_models import (
    FailureReason,
    JobHandle,
    PollOutcome,
    Provider,
    TerminalResult,
)
from src.videogen.generation.generation_service import GenerationService
from tests.helpers.timing import RecordingSleep
from tests.mocks.adapters import ScriptedAdapter, pending

pytestmark = pytest.mark.contract


class RecordingFactory:
    def __init__(self, adapter: ScriptedAdapter) -> None:
        self.adapter = adapter
        self.calls: list[tuple[Provider, str]] = []

    def __call__(self, provider: Provider, credential: str) -> ScriptedAdapter:
        self.calls.append((provider, credential))
        return self.adapter


def build_client(
    adapter: ScriptedAdapter,
    *,
    config: AppConfig | None = None,
) -> tuple[TestClient, RecordingFactory]:
    factory = RecordingFactory(adapter)
    service = GenerationService(
        config=config or AppConfig(max_poll_attempts=5),
        adapter_factory=factory,  # type: ignore[arg-type]
        sleep=RecordingSleep(),
    )
    app = FastAPI()
    app.state.generation_service = service
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(router)
    return TestClient(app), factory


def test_completed_video_returns_url() -> None:
    adapter = ScriptedAdapter(
        poll_script=[*pending(2), PollOutcome.succeeded("https://cdn/x.mp4")]
    )
    client, factory = build_client(adapter)

    response = client.post(
        "/api/generate-video",
        json={"prompt": "cat on a skateboard", "provider": "replicate", "apiKey": "r8_key"},
    )

    assert response.status_code == 200
    assert response.json() == {"videoUrl": "https://cdn/x.mp4", "status": "completed"}
    assert factory.calls == [(Provider.REPLICATE, "r8_key")]


def test_missing_prompt_returns_400() -> None:
    client, factory = build_client(ScriptedAdapter())

    response = client.post("/api/generate-video", json={"provider": "replicate", "apiKey": "k"})

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    assert factory.calls == []


def test_null_prompt_returns_400() -> None:
    client, factory = build_client(ScriptedAdapter())

    response = client.post(
        "/api/generate-video",
        json={"prompt": None, "provider": "replicate", "apiKey": "k"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    assert factory.calls == []


def test_null_provider_defaults_to_replicate() -> None:
    adapter = ScriptedAdapter(poll_script=[PollOutcome.succeeded("https://cdn/x.mp4")])
    client, factory = build_client(adapter)

    response = client.post(
        "/api/generate-video",
        json={"prompt": "a prompt", "provider": None, "apiKey": "r8_key"},
    )

    assert response.status_code == 200
    assert factory.calls == [(Provider.REPLICATE, "r8_key")]


@pytest.mark.parametrize(
    "body",
    [
        b"{not json",
        b'{"prompt": 123, "provider": "replicate", "apiKey": "k"}',
        b'["prompt"]',
    ],
)
def test_unreadable_body_returns_400_error_shape(body: bytes) -> None:
    client, factory = build_client(ScriptedAdapter())

    response = client.post(
        "/api/generate-video",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert factory.calls == []


def test_empty_credential_returns_400_without_calling_provider() -> None:
    adapter = ScriptedAdapter()
    client, factory = build_client(adapter)

    response = client.post(
        "/api/generate-video",
        json={"prompt": "cat on a skateboard", "provider": "replicate", "apiKey": ""},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Replicate API key not configured"}
    assert factory.calls == []
    assert adapter.submitted == []


def test_configured_credential_is_used_when_body_has_none() -> None:
    adapter = ScriptedAdapter(poll_script=[PollOutcome.succeeded("https://cdn/x.mp4")])
    config = AppConfig(replicate=ReplicateSettings(api_token="r8_env"))
    client, factory = build_client(adapter, config=config)

    response = client.post("/api/generate-video", json={"prompt": "a prompt"})

    assert response.status_code == 200
    assert factory.calls == [(Provider.REPLICATE, "r8_env")]


def test_unknown_provider_returns_400() -> None:
    client, _ = build_client(ScriptedAdapter())

    response = client.post(
        "/api/generate-video",
        json={"prompt": "a prompt", "provider": "runway", "apiKey": "k"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Unsupported provider 'runway'"}


def test_submission_status_is_propagated() -> None:
    adapter = ScriptedAdapter(
        submit_result=TerminalResult.provider_error(
            'Replicate API request failed: 401 Unauthorized. Details: {"detail":"bad token"}',
            http_status=401,
            failure_reason=FailureReason.SUBMISSION_REJECTED,
        )
    )
    client, _ = build_client(adapter)

    response = client.post(
        "/api/generate-video",
        json={"prompt": "a prompt", "provider": "replicate", "apiKey": "bad"},
    )

    assert response.status_code == 401
    assert "bad token" in response.json()["error"]
    assert adapter.poll_calls == 0


def test_poll_exhaustion_returns_408() -> None:
    client, _ = build_client(ScriptedAdapter())

    response = client.post(
        "/api/generate-video",
        json={"prompt": "a prompt", "provider": "replicate", "apiKey": "k"},
    )

    assert response.status_code == 408
    assert response.json() == {"error": "Video generation timed out after 5 polling attempts"}


def test_failed_job_returns_500() -> None:
    adapter = ScriptedAdapter(
        provider=Provider.OPENAI,
        submit_result=JobHandle(provider_job_id="gen-1", provider=Provider.OPENAI),
        poll_script=[PollOutcome.failed("Generation failed: content policy")],
    )
    client, _ = build_client(adapter)

    response = client.post(
        "/api/generate-video",
        json={"prompt": "a prompt", "provider": "openai", "apiKey": "sk-key"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Generation failed: content policy"}
