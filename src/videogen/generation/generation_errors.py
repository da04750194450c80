"""Domain-specific exceptions for the generation pipeline."""


class GenerationError(Exception):
    """Base class for generation-related errors."""


class RequestValidationError(GenerationError):
    """Raised when a caller request is rejected before any provider call."""


class PromptMissingError(RequestValidationError):
    """Raised when the prompt is empty."""


class UnsupportedProviderError(RequestValidationError):
    """Raised when the requested provider is not known."""


class CredentialMissingError(RequestValidationError):
    """Raised when no credential is available for the selected provider."""
