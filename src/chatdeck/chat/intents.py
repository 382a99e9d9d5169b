"""Intents: named requests to transition conversation state.

Each intent is an immutable value; ``Intent`` is the closed union the
reducer accepts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from .models import Chat, Message


@dataclass(frozen=True)
class ReplaceAllChats:
    chats: list[Chat]


@dataclass(frozen=True)
class AddChat:
    """Prepend a chat and make it current."""

    chat: Chat


@dataclass(frozen=True)
class UpdateChat:
    """Merge fields into an existing chat, stamping ``updated_at`` with ``at``."""

    chat_id: str
    updates: dict[str, Any]
    at: datetime


@dataclass(frozen=True)
class DeleteChat:
    chat_id: str


@dataclass(frozen=True)
class SetCurrentChat:
    chat_id: str | None


@dataclass(frozen=True)
class AppendMessage:
    """Append a message; the chat's ``updated_at`` becomes the message timestamp."""

    chat_id: str
    message: Message


@dataclass(frozen=True)
class SetLoading:
    value: bool


@dataclass(frozen=True)
class SetError:
    """Set or clear the error text. Always ends loading."""

    error: str | None


@dataclass(frozen=True)
class MergeSettings:
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SetApiKey:
    api_key: str


@dataclass(frozen=True)
class ClearAllChats:
    pass


Intent = Union[
    ReplaceAllChats,
    AddChat,
    UpdateChat,
    DeleteChat,
    SetCurrentChat,
    AppendMessage,
    SetLoading,
    SetError,
    MergeSettings,
    SetApiKey,
    ClearAllChats,
]
