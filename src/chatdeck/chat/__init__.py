"""Conversation state: entities, intents and the reducer.

The session facade and synchronization layer live in ``chatdeck.chat.session``
and ``chatdeck.chat.sync``; they depend on the storage and llm packages and are
not imported here.
"""

from .factory import derive_title, generate_id, new_chat, new_message, utc_now
from .intents import (
    AddChat,
    AppendMessage,
    ClearAllChats,
    DeleteChat,
    Intent,
    MergeSettings,
    ReplaceAllChats,
    SetApiKey,
    SetCurrentChat,
    SetError,
    SetLoading,
    UpdateChat,
)
from .models import NEW_CHAT_TITLE, Chat, ConversationState, Message, Role, Settings
from .reducer import reduce

__all__ = [
    "NEW_CHAT_TITLE",
    "Chat",
    "ConversationState",
    "Message",
    "Role",
    "Settings",
    "derive_title",
    "generate_id",
    "new_chat",
    "new_message",
    "utc_now",
    "Intent",
    "AddChat",
    "AppendMessage",
    "ClearAllChats",
    "DeleteChat",
    "MergeSettings",
    "ReplaceAllChats",
    "SetApiKey",
    "SetCurrentChat",
    "SetError",
    "SetLoading",
    "UpdateChat",
    "reduce",
]
