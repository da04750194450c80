"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .generation.generation_models import Provider


@dataclass(slots=True)
class ReplicateSettings:
    api_token: str = ""
    base_url: str = "https://api.replicate.com/v1"
    model: str = "openai/sora-2"
    seconds: int = 8
    aspect_ratio: str = "landscape"
    openai_api_key: str = ""


@dataclass(slots=True)
class OpenAISettings:
    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    model: str = "sora-2"
    max_duration: int = 10


@dataclass(slots=True)
class AppConfig:
    request_timeout_seconds: float = 300.0
    poll_interval_seconds: float = 10.0
    max_poll_attempts: int = 30
    provider_http_timeout_seconds: float = 30.0
    cors_allow_origins: Sequence[str] = ("*",)
    frontend_root: Path = Path("build")
    replicate: ReplicateSettings = field(default_factory=ReplicateSettings)
    openai: OpenAISettings = field(default_factory=OpenAISettings)

    def __post_init__(self) -> None:
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        if self.max_poll_attempts <= 0:
            raise ValueError("max_poll_attempts must be positive")
        if self.provider_http_timeout_seconds <= 0:
            raise ValueError("provider_http_timeout_seconds must be positive")

    def default_credential(self, provider: Provider) -> str:
        """Return the server-side credential configured for ``provider``."""
        if provider is Provider.REPLICATE:
            return self.replicate.api_token
        return self.openai.api_key


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_config() -> AppConfig:
    """Load configuration from environment (``.env`` is read first)."""
    load_dotenv(".env", override=False)

    replicate = ReplicateSettings(
        api_token=os.getenv("REPLICATE_API_TOKEN", ""),
        base_url=os.getenv("REPLICATE_API_BASE", "https://api.replicate.com/v1"),
        model=os.getenv("REPLICATE_MODEL", "openai/sora-2"),
        seconds=int(os.getenv("REPLICATE_VIDEO_SECONDS", 8)),
        aspect_ratio=os.getenv("REPLICATE_ASPECT_RATIO", "landscape"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
    )
    openai = OpenAISettings(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        base_url=os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1"),
        model=os.getenv("OPENAI_VIDEO_MODEL", "sora-2"),
        max_duration=int(os.getenv("OPENAI_MAX_DURATION", 10)),
    )

    return AppConfig(
        request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", 300)),
        poll_interval_seconds=float(os.getenv("POLL_INTERVAL_SECONDS", 10)),
        max_poll_attempts=int(os.getenv("MAX_POLL_ATTEMPTS", 30)),
        provider_http_timeout_seconds=float(
            os.getenv("PROVIDER_HTTP_TIMEOUT_SECONDS", 30)
        ),
        cors_allow_origins=_split_origins(os.getenv("CORS_ALLOW_ORIGINS", "*")),
        frontend_root=Path(os.getenv("FRONTEND_ROOT", "build")),
        replicate=replicate,
        openai=openai,
    )
