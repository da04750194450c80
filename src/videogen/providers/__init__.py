"""Adapters for video generation backends."""

from .providers_base import ProviderAdapter
from .providers_factory import create_adapter
from .providers_openai import OpenAIAdapter
from .providers_replicate import ReplicateAdapter

__all__ = [
    "ProviderAdapter",
    "OpenAIAdapter",
    "ReplicateAdapter",
    "create_adapter",
]
