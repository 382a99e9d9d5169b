"""Durable storage for chatdeck.

Provides key/value backends and the gateway that maps chat data onto them.
"""

from .base import KeyValueStore
from .factory import create_store
from .gateway import PersistenceGateway

__all__ = [
    "KeyValueStore",
    "PersistenceGateway",
    "create_store",
]
