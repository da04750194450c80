"""Factory for provider adapters."""

from ..config import AppConfig
from ..generation.generation_models import Provider
from .providers_base import ProviderAdapter
from .providers_openai import OpenAIAdapter
from .providers_replicate import ReplicateAdapter


def create_adapter(
    provider: Provider | str, *, credential: str, config: AppConfig
) -> ProviderAdapter:
    """Instantiate an adapter for ``provider`` bound to ``credential``."""
    try:
        selected = Provider(str(provider).lower())
    except ValueError:
        raise ValueError(f"Unsupported provider '{provider}'") from None

    timeout = config.provider_http_timeout_seconds
    if selected is Provider.REPLICATE:
        settings = config.replicate
        return ReplicateAdapter(
            credential=credential,
            base_url=settings.base_url,
            timeout_seconds=timeout,
            model=settings.model,
            seconds=settings.seconds,
            aspect_ratio=settings.aspect_ratio,
            openai_api_key=settings.openai_api_key or None,
        )
    settings = config.openai
    return OpenAIAdapter(
        credential=credential,
        base_url=settings.base_url,
        timeout_seconds=timeout,
        model=settings.model,
        max_duration=settings.max_duration,
    )
