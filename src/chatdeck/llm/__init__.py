from .base import LLMProvider
from .errors import (
    ChatError,
    EmptyResponse,
    InvalidCredential,
    MalformedRequest,
    NetworkUnavailable,
    ProviderNotConfigured,
    QuotaExceeded,
    UnknownProviderError,
    normalize_error,
)
from .factory import create_llm_provider, resolve_endpoint
from .models import ChatMessage, LLMResponse
from .pipeline import RequestPipeline
from .providers import OpenAICompatibleProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "resolve_endpoint",
    "ChatMessage",
    "LLMResponse",
    "OpenAICompatibleProvider",
    "RequestPipeline",
    "ChatError",
    "EmptyResponse",
    "InvalidCredential",
    "MalformedRequest",
    "NetworkUnavailable",
    "ProviderNotConfigured",
    "QuotaExceeded",
    "UnknownProviderError",
    "normalize_error",
]
