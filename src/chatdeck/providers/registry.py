"""Provider catalog and credential checks.

This module hides the list of supported backends. Everything here is
read-only data and pure functions.
"""

from .models import ProviderConfig

PROVIDERS: tuple[ProviderConfig, ...] = (
    ProviderConfig(
        id="openai",
        display_name="OpenAI",
        base_url="https://api.openai.com/v1",
        models=(
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4-turbo",
            "gpt-4",
            "gpt-3.5-turbo",
        ),
        credential_prefix="sk-",
        description="Official OpenAI API with GPT models",
    ),
    ProviderConfig(
        id="anthropic",
        display_name="Anthropic",
        base_url="https://api.anthropic.com",
        models=(
            "claude-3-5-sonnet-20241022",
            "claude-3-5-haiku-20241022",
            "claude-3-opus-20240229",
            "claude-3-sonnet-20240229",
            "claude-3-haiku-20240307",
        ),
        credential_prefix="sk-ant-",
        description="Anthropic's Claude models",
    ),
    ProviderConfig(
        id="openrouter",
        display_name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        models=(
            "openai/gpt-4o",
            "openai/gpt-4o-mini",
            "openai/gpt-4-turbo",
            "openai/o1-mini",
            "anthropic/claude-3.5-sonnet",
            "anthropic/claude-3.5-haiku",
            "anthropic/claude-3-opus",
            "google/gemini-pro-1.5",
            "google/gemini-flash-1.5",
            "google/gemma-2-9b-it:free",
            "meta-llama/llama-3.2-11b-vision-instruct:free",
            "meta-llama/llama-3.1-405b-instruct",
            "meta-llama/llama-3.1-8b-instruct:free",
            "meta-llama/codellama-34b-instruct",
            "qwen/qwen-2.5-72b-instruct",
            "qwen/qwen-2-vl-72b-instruct",
            "qwen/qwen-2.5-coder-32b-instruct",
            "qwen/qwen3-coder:free",
            "deepseek/deepseek-chat",
            "deepseek/deepseek-coder",
            "mistralai/mistral-large",
            "mistralai/mistral-7b-instruct:free",
            "mistralai/codestral-mamba",
            "microsoft/wizardlm-2-8x22b",
            "cohere/command-r-plus",
            "perplexity/llama-3.1-sonar-large-128k-online",
            "nvidia/llama-3.1-nemotron-70b-instruct",
            "fireworks/firellava-13b",
        ),
        credential_prefix="sk-or-v1-",
        description="Access many AI models through one API",
    ),
    ProviderConfig(
        id="custom",
        display_name="Custom Provider",
        base_url="",
        models=("custom-model-1",),
        credential_prefix=None,
        description="Configure your own OpenAI-compatible endpoint",
    ),
)

_BY_ID = {provider.id: provider for provider in PROVIDERS}

# Keys accepted beyond the prefix: a cheap length floor, not format validation
MIN_CREDENTIAL_BODY = 10


def get_provider(provider_id: str) -> ProviderConfig | None:
    """Look up a provider by id."""
    return _BY_ID.get(provider_id)


def list_providers() -> list[ProviderConfig]:
    return list(PROVIDERS)


def validate_credential(candidate: object, provider_id: str) -> bool:
    """Check that an API key plausibly belongs to a provider.

    Args:
        candidate: Value entered by the user
        provider_id: Registered provider id

    Returns:
        False for non-text, empty or unknown-provider input. Without a
        declared prefix any non-empty key passes. With a prefix the trimmed
        key must start with it and be longer than ``len(prefix) + 10``.
    """
    if not isinstance(candidate, str):
        return False
    provider = get_provider(provider_id)
    if provider is None:
        return False

    trimmed = candidate.strip()
    if not provider.credential_prefix:
        return len(trimmed) > 0

    prefix = provider.credential_prefix
    return trimmed.startswith(prefix) and len(trimmed) > len(prefix) + MIN_CREDENTIAL_BODY


def mask_credential(key: str) -> str:
    """Shorten a key for display, e.g. ``sk-or-...1234``."""
    if not key or len(key) < 10:
        return key
    return f"{key[:6]}...{key[-4:]}"
