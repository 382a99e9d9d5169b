"""Pure transition function for conversation state.

``reduce`` is total: unknown intents and intents whose precondition does
not hold (e.g. appending to a missing chat) return the state unchanged.
It performs no I/O and reads no clock; every timestamp arrives inside the
intent.
"""

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
from .models import Chat, ConversationState


def _replace_chat(
    state: ConversationState,
    chat_id: str,
    update: dict,
) -> ConversationState | None:
    """Return a copy of ``state`` with one chat updated, or None if absent."""
    if state.find_chat(chat_id) is None:
        return None
    chats: list[Chat] = [
        chat.model_copy(update=update) if chat.id == chat_id else chat
        for chat in state.chats
    ]
    return state.model_copy(update={"chats": chats})


def reduce(state: ConversationState, intent: Intent) -> ConversationState:
    """Apply one intent to the state and return the next state."""
    if isinstance(intent, ReplaceAllChats):
        return state.model_copy(update={"chats": list(intent.chats)})

    if isinstance(intent, AddChat):
        return state.model_copy(update={
            "chats": [intent.chat, *state.chats],
            "current_chat_id": intent.chat.id,
            "error": None,
        })

    if isinstance(intent, UpdateChat):
        updated = _replace_chat(
            state, intent.chat_id, {**intent.updates, "updated_at": intent.at}
        )
        return updated if updated is not None else state

    if isinstance(intent, DeleteChat):
        remaining = [chat for chat in state.chats if chat.id != intent.chat_id]
        current = state.current_chat_id
        if current == intent.chat_id:
            current = remaining[0].id if remaining else None
        return state.model_copy(update={
            "chats": remaining,
            "current_chat_id": current,
        })

    if isinstance(intent, SetCurrentChat):
        return state.model_copy(update={"current_chat_id": intent.chat_id, "error": None})

    if isinstance(intent, AppendMessage):
        chat = state.find_chat(intent.chat_id)
        if chat is None:
            return state
        updated = _replace_chat(state, intent.chat_id, {
            "messages": [*chat.messages, intent.message],
            "updated_at": intent.message.timestamp,
        })
        return updated.model_copy(update={"error": None})

    if isinstance(intent, SetLoading):
        return state.model_copy(update={"is_loading": intent.value})

    if isinstance(intent, SetError):
        return state.model_copy(update={"error": intent.error, "is_loading": False})

    if isinstance(intent, MergeSettings):
        settings = state.settings.model_copy(update=intent.updates)
        return state.model_copy(update={"settings": settings})

    if isinstance(intent, SetApiKey):
        settings = state.settings.model_copy(update={"api_key": intent.api_key})
        return state.model_copy(update={"settings": settings, "error": None})

    if isinstance(intent, ClearAllChats):
        return state.model_copy(update={
            "chats": [],
            "current_chat_id": None,
            "error": None,
        })

    return state
