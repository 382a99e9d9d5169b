"""File-backed key/value store.

All records live in one JSON object on disk. Every write replaces the file
atomically so a crash never leaves a half-written document behind.
"""

import json
import os
import tempfile
from pathlib import Path

import structlog

from .base import KeyValueStore

logger = structlog.get_logger(__name__)


class FileStore(KeyValueStore):
    """Persistent store backed by a single JSON file.

    The document is read lazily on first access and cached; writes go
    through to disk immediately.
    """

    def __init__(self, path: str | Path = "~/.chatdeck/storage.json"):
        self._path = Path(path).expanduser()
        self._items: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        items: dict[str, str] = {}
        if self._path.exists():
            raw = self._path.read_text(encoding="utf-8")
            try:
                document = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as exc:
                # Unreadable document: start over, it is replaced on next write
                logger.warning("storage_document_corrupt", path=str(self._path), error=str(exc))
                document = {}
            if isinstance(document, dict):
                items = {str(k): v for k, v in document.items() if isinstance(v, str)}
            else:
                logger.warning("storage_document_corrupt", path=str(self._path), error="not an object")

        self._items = items
        return items

    def _flush(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = dict(self._load())
        items[key] = value
        self._flush(items)
        self._items = items

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        items = {k: v for k, v in items.items() if k != key}
        self._flush(items)
        self._items = items

    def keys(self) -> list[str]:
        return list(self._load())

    @property
    def backend_type(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path
