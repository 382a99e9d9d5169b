"""Persistence gateway: four named records over a key/value store.

Records:
- credential: plain text
- settings: JSON object
- chats: JSON array of chats, timestamps as ISO-8601 text
- current chat id: plain text, removed when no chat is selected

Reads never raise: a missing or unparseable record reads as empty. Writes
are best effort: failures are logged and swallowed.
"""

import json
from typing import Any

import structlog

from ..chat.models import Chat, Settings
from .base import KeyValueStore

logger = structlog.get_logger(__name__)

# Errors a backend or the JSON codec can raise for bad data or I/O trouble
STORAGE_ERRORS = (OSError, ValueError, TypeError)


class PersistenceGateway:
    """Reads and writes chat data and settings to durable storage."""

    def __init__(self, store: KeyValueStore, namespace: str = "chatdeck"):
        self._store = store
        self._namespace = namespace
        self.api_key_key = f"{namespace}_api_key"
        self.settings_key = f"{namespace}_settings"
        self.chats_key = f"{namespace}_chats"
        self.current_chat_id_key = f"{namespace}_current_chat_id"

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def namespace(self) -> str:
        return self._namespace

    def _read(self, key: str) -> str | None:
        try:
            return self._store.get_item(key)
        except STORAGE_ERRORS as exc:
            logger.warning("storage_read_failed", key=key, error=str(exc))
            return None

    def _read_json(self, key: str) -> Any:
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("storage_parse_failed", key=key, error=str(exc))
            return None

    def _write(self, key: str, value: str) -> bool:
        try:
            self._store.set_item(key, value)
        except STORAGE_ERRORS as exc:
            logger.error("storage_write_failed", key=key, error=str(exc))
            return False
        return True

    def _remove(self, *keys: str) -> None:
        for key in keys:
            try:
                self._store.remove_item(key)
            except STORAGE_ERRORS as exc:
                logger.error("storage_remove_failed", key=key, error=str(exc))

    # Credential

    def get_api_key(self) -> str | None:
        return self._read(self.api_key_key)

    def set_api_key(self, api_key: str) -> None:
        self._write(self.api_key_key, api_key)

    def remove_api_key(self) -> None:
        self._remove(self.api_key_key)

    # Settings

    def get_settings(self) -> dict[str, Any]:
        """Return the stored settings object, or {} if absent or unreadable."""
        stored = self._read_json(self.settings_key)
        if not isinstance(stored, dict):
            if stored is not None:
                logger.warning("storage_parse_failed", key=self.settings_key, error="not an object")
            return {}
        return stored

    def set_settings(self, settings: Settings | dict[str, Any]) -> None:
        """Merge settings over the stored object and write the result."""
        if isinstance(settings, Settings):
            settings = settings.model_dump(mode="json")
        merged = {**self.get_settings(), **settings}
        try:
            payload = json.dumps(merged)
        except STORAGE_ERRORS as exc:
            logger.error("storage_encode_failed", key=self.settings_key, error=str(exc))
            return
        self._write(self.settings_key, payload)

    # Chats

    def get_chats(self) -> list[dict[str, Any]]:
        """Return stored chats as raw JSON objects (timestamps still text)."""
        stored = self._read_json(self.chats_key)
        if not isinstance(stored, list):
            if stored is not None:
                logger.warning("storage_parse_failed", key=self.chats_key, error="not an array")
            return []
        return [entry for entry in stored if isinstance(entry, dict)]

    def save_chats(self, chats: list[Chat]) -> None:
        try:
            payload = json.dumps([chat.model_dump(mode="json") for chat in chats])
        except STORAGE_ERRORS as exc:
            logger.error("storage_encode_failed", key=self.chats_key, error=str(exc))
            return
        self._write(self.chats_key, payload)

    # Current chat

    def get_current_chat_id(self) -> str | None:
        return self._read(self.current_chat_id_key) or None

    def save_current_chat_id(self, chat_id: str | None) -> None:
        if chat_id:
            self._write(self.current_chat_id_key, chat_id)
        else:
            self._remove(self.current_chat_id_key)

    # Bulk

    def clear_all_chats(self) -> None:
        """Remove chats and the current chat id; credential and settings stay."""
        self._remove(self.chats_key, self.current_chat_id_key)

    def clear_all(self) -> None:
        self._remove(
            self.api_key_key,
            self.settings_key,
            self.chats_key,
            self.current_chat_id_key,
        )
