from typing import Any

import httpx

from ..chat.models import Settings
from ..providers import get_provider
from .base import LLMProvider
from .errors import ProviderNotConfigured
from .providers import OpenAICompatibleProvider

ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_PATH_SUFFIX = "/v1"


def resolve_endpoint(settings: Settings) -> tuple[str, dict[str, str]]:
    """Resolve the base URL and fixed headers for the configured provider.

    The Anthropic endpoint is addressed under ``/v1`` of its configured base
    URL and needs the ``anthropic-version`` header; all other providers use
    their base URL as-is.

    Raises:
        ProviderNotConfigured: Unknown provider id or no base URL available
    """
    provider = get_provider(settings.provider)
    if provider is None:
        raise ProviderNotConfigured(f"Unknown provider: {settings.provider}")

    base_url = (settings.base_url or provider.base_url).strip().rstrip("/")
    if not base_url:
        raise ProviderNotConfigured(
            f"{provider.display_name} requires a base URL. Please set one in settings."
        )

    headers: dict[str, str] = {}
    if provider.id == "anthropic":
        if not base_url.endswith(ANTHROPIC_PATH_SUFFIX):
            base_url += ANTHROPIC_PATH_SUFFIX
        headers["anthropic-version"] = ANTHROPIC_VERSION

    return base_url, headers


def create_llm_provider(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    **client_kwargs: Any
) -> LLMProvider:
    """Create an LLM provider instance from settings.

    This factory function hides the per-provider wiring: every registered
    provider is served through the OpenAI-compatible client, with endpoint
    and headers taken from ``resolve_endpoint``. Requests are never retried.

    Args:
        settings: Active settings (credential, provider id, model, base URL)
        http_client: Optional shared HTTP client (e.g. with a mock transport)
        **client_kwargs: Additional kwargs for the AsyncOpenAI client

    Returns:
        Initialized LLM provider instance

    Raises:
        ProviderNotConfigured: If the credential is empty or the provider
            cannot be resolved

    Examples:
        >>> provider = create_llm_provider(
        ...     Settings(api_key="sk-or-v1-...", provider="openrouter",
        ...              model="deepseek/deepseek-chat")
        ... )
    """
    if not settings.api_key.strip():
        raise ProviderNotConfigured()

    base_url, headers = resolve_endpoint(settings)
    client_kwargs.setdefault("max_retries", 0)
    if http_client is not None:
        client_kwargs["http_client"] = http_client

    return OpenAICompatibleProvider(
        api_key=settings.api_key.strip(),
        model=settings.model,
        base_url=base_url,
        default_headers=headers,
        **client_kwargs
    )
