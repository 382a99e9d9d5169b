"""Data models for conversation state.

These models define the structure of chats, messages and settings,
independent of the storage backend used to persist them.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NEW_CHAT_TITLE = "New Chat"


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One turn in a chat. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Session-unique message identifier")
    content: str = Field(description="Trimmed message text")
    role: Role = Field(description="Author of the message")
    timestamp: datetime = Field(description="Creation time (UTC)")


class Chat(BaseModel):
    """A conversation thread: an ordered list of messages plus metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Session-unique chat identifier")
    title: str = Field(default=NEW_CHAT_TITLE)
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @property
    def is_untitled(self) -> bool:
        """True while the chat still carries the sentinel title."""
        return self.title == NEW_CHAT_TITLE


class Settings(BaseModel):
    """Active provider, model and credential configuration."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default="", description="Bearer credential sent to the provider")
    provider: str = Field(default="openai", description="Registered provider id")
    base_url: str | None = Field(
        default=None,
        description="Optional override of the provider's base URL"
    )
    model: str = Field(default="gpt-4o-mini")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, gt=0)

    @classmethod
    def defaults(cls) -> "Settings":
        return cls()


class ConversationState(BaseModel):
    """Root aggregate owned by the reducer.

    ``chats`` is ordered most-recently-created first. ``current_chat_id``,
    when set, always references an entry of ``chats``.
    """

    model_config = ConfigDict(frozen=True)

    chats: list[Chat] = Field(default_factory=list)
    current_chat_id: str | None = None
    is_loading: bool = False
    error: str | None = None
    settings: Settings = Field(default_factory=Settings)

    def find_chat(self, chat_id: str | None) -> Chat | None:
        """Look up a chat by id."""
        if chat_id is None:
            return None
        for chat in self.chats:
            if chat.id == chat_id:
                return chat
        return None

    @property
    def current_chat(self) -> Chat | None:
        return self.find_chat(self.current_chat_id)
