"""Abstract base class for durable key/value storage.

This module defines the interface the persistence gateway writes through.
The abstraction hides:
- Storage medium (process memory, a JSON file on disk)
- Encoding of the backing document
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """String-to-string storage with named records.

    Backends may raise ``OSError`` or ``ValueError``; callers that must not
    fail (the persistence gateway) catch them.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
