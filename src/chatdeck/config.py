"""Configuration from environment variables.

Centralizes creation of the storage stack so commands and embedding
applications do not repeat environment lookups.

Environment variables:
    CHATDECK_STORAGE: Storage backend, 'file' or 'memory' (default: file)
    CHATDECK_DATA_PATH: JSON file used by the file backend
        (default: ~/.chatdeck/storage.json)
    CHATDECK_NAMESPACE: Prefix of the stored record names (default: chatdeck)
    CHATDECK_LOG_LEVEL: debug, info, warning or error (default: warning)
"""

import os
from pathlib import Path

from .storage import KeyValueStore, PersistenceGateway, create_store

DEFAULT_DATA_PATH = Path("~/.chatdeck/storage.json")
DEFAULT_NAMESPACE = "chatdeck"


def get_log_level() -> str:
    return os.getenv("CHATDECK_LOG_LEVEL", "warning")


def get_store() -> KeyValueStore:
    """Create the key/value store selected by the environment.

    Raises:
        ValueError: If CHATDECK_STORAGE names an unknown backend
    """
    backend = os.getenv("CHATDECK_STORAGE", "file").lower()
    if backend == "file":
        path = os.getenv("CHATDECK_DATA_PATH") or str(DEFAULT_DATA_PATH)
        return create_store("file", path=path)
    return create_store(backend)


def get_gateway(store: KeyValueStore | None = None) -> PersistenceGateway:
    namespace = os.getenv("CHATDECK_NAMESPACE", DEFAULT_NAMESPACE)
    return PersistenceGateway(store or get_store(), namespace=namespace)
