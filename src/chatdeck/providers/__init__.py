from .catalog import categorize_models, model_display_name, search_models
from .models import ProviderConfig
from .registry import (
    PROVIDERS,
    get_provider,
    list_providers,
    mask_credential,
    validate_credential,
)

__all__ = [
    "PROVIDERS",
    "ProviderConfig",
    "categorize_models",
    "get_provider",
    "list_providers",
    "mask_credential",
    "model_display_name",
    "search_models",
    "validate_credential",
]
