"""Grouping and search over model ids.

Model ids follow the OpenRouter ``vendor/name[:free]`` convention; ids
without a vendor prefix (plain OpenAI or Anthropic model names) land in
"Other".
"""

import re

VENDOR_FAMILIES: dict[str, str] = {
    "OpenAI": "openai/",
    "Anthropic": "anthropic/",
    "Google": "google/",
    "Meta Llama": "meta-llama/",
    "Qwen": "qwen/",
    "DeepSeek": "deepseek/",
    "Mistral": "mistralai/",
    "Microsoft": "microsoft/",
    "Cohere": "cohere/",
    "Perplexity": "perplexity/",
}

ALL_CATEGORIES = "all"

_CODE_MARKERS = ("code", "coder", "codellama", "codestral")
_VISION_MARKERS = ("vision", "vl", "firellava")


def _is_code_model(model: str) -> bool:
    return any(marker in model for marker in _CODE_MARKERS)


def _is_vision_model(model: str) -> bool:
    return any(marker in model for marker in _VISION_MARKERS)


def categorize_models(models: list[str] | tuple[str, ...]) -> dict[str, list[str]]:
    """Group model ids into vendor families and cross-cutting buckets.

    A model can appear in several buckets (e.g. a free coding model is in
    its vendor family, "Free Models" and "Code Models"). Empty buckets are
    dropped; insertion order is preserved.
    """
    categories: dict[str, list[str]] = {
        name: [m for m in models if m.startswith(prefix)]
        for name, prefix in VENDOR_FAMILIES.items()
    }
    categories["Free Models"] = [m for m in models if ":free" in m]
    categories["Code Models"] = [m for m in models if _is_code_model(m)]
    categories["Vision Models"] = [m for m in models if _is_vision_model(m)]
    categories["Other"] = [
        m for m in models
        if not any(m.startswith(prefix) for prefix in VENDOR_FAMILIES.values())
    ]
    return {name: members for name, members in categories.items() if members}


def search_models(
    models: list[str] | tuple[str, ...],
    term: str = "",
    category: str = ALL_CATEGORIES,
) -> list[str]:
    """Filter models by category, then by case-insensitive substring."""
    if category == ALL_CATEGORIES:
        selected = list(models)
    else:
        selected = categorize_models(models).get(category, [])

    if term:
        needle = term.lower()
        selected = [m for m in selected if needle in m.lower()]
    return selected


def model_display_name(model: str) -> str:
    """``qwen/qwen3-coder:free`` -> ``qwen3-coder (Free)``."""
    name = re.sub(r"^[^/]+/", "", model)
    return re.sub(r":free$", " (Free)", name)
