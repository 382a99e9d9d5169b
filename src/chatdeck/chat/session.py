"""Chat session: the operations exposed to a user interface.

A session wires a ``StateStore``, the request pipeline and the persistence
gateway together. UI code reads ``session.state`` and calls the methods
below; it never dispatches intents itself.
"""

from typing import Any

import structlog

from ..llm.errors import ChatError
from ..llm.pipeline import RequestPipeline
from ..providers import get_provider
from ..storage.gateway import PersistenceGateway
from .factory import derive_title, new_chat, new_message, utc_now
from .intents import (
    AddChat,
    AppendMessage,
    ClearAllChats,
    DeleteChat,
    MergeSettings,
    SetApiKey,
    SetCurrentChat,
    SetError,
    SetLoading,
    UpdateChat,
)
from .models import Chat, ConversationState, Role, Settings
from .sync import PersistenceSync, StateStore

logger = structlog.get_logger(__name__)


class ChatSession:
    """Multi-chat conversation session.

    Usage:
        session = ChatSession.open(gateway, RequestPipeline())
        await session.send_message("Explain quantum computing")
        print(session.get_current_chat().messages[-1].content)
        await session.close()
    """

    def __init__(
        self,
        store: StateStore,
        pipeline: RequestPipeline,
        gateway: PersistenceGateway | None = None,
    ):
        self._store = store
        self._pipeline = pipeline
        self._gateway = gateway

    @classmethod
    def open(
        cls,
        gateway: PersistenceGateway,
        pipeline: RequestPipeline | None = None,
    ) -> "ChatSession":
        """Create a session backed by storage and load persisted state."""
        pipeline = pipeline or RequestPipeline()
        store = StateStore()
        sync = PersistenceSync(gateway, pipeline)
        store.subscribe(sync)
        sync.hydrate(store)
        return cls(store, pipeline, gateway)

    @property
    def state(self) -> ConversationState:
        """Current state snapshot (immutable)."""
        return self._store.state

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def pipeline(self) -> RequestPipeline:
        return self._pipeline

    # Chat management

    def create_new_chat(self) -> Chat:
        chat = new_chat()
        self._store.dispatch(AddChat(chat))
        return chat

    def delete_chat(self, chat_id: str) -> None:
        self._store.dispatch(DeleteChat(chat_id))

    def select_chat(self, chat_id: str | None) -> None:
        self._store.dispatch(SetCurrentChat(chat_id))

    def get_current_chat(self) -> Chat | None:
        return self._store.state.current_chat

    def clear_all_chats(self) -> None:
        self._store.dispatch(ClearAllChats())
        if self._gateway is not None:
            self._gateway.clear_all_chats()

    # Messaging

    async def send_message(self, content: str) -> None:
        """Send user text in the current chat and append the reply.

        Empty or whitespace-only text does nothing. While a previous send
        is still in flight the call is ignored. Provider failures end up in
        ``state.error``; they are never raised.
        """
        if not content.strip():
            return
        if self._store.state.is_loading:
            logger.warning("send_rejected_while_loading")
            return

        chat = self.get_current_chat()
        if chat is None:
            chat = new_chat(derive_title(content))
            self._store.dispatch(AddChat(chat))

        user_message = new_message(content, Role.USER)
        self._store.dispatch(AppendMessage(chat.id, user_message))
        self._store.dispatch(SetLoading(True))

        if not chat.messages and chat.is_untitled:
            self._store.dispatch(UpdateChat(
                chat.id,
                {"title": derive_title(content)},
                at=utc_now(),
            ))

        history = [*chat.messages, user_message]
        settings = self._store.state.settings
        logger.debug("send_started", chat_id=chat.id, history=len(history))

        try:
            reply = await self._pipeline.send(history, settings)
        except ChatError as exc:
            logger.warning("send_failed", chat_id=chat.id, error_type=type(exc).__name__)
            self._store.dispatch(SetError(str(exc)))
        else:
            self._store.dispatch(AppendMessage(chat.id, new_message(reply, Role.ASSISTANT)))
        finally:
            self._store.dispatch(SetLoading(False))

    # Settings

    def set_api_key(self, api_key: str) -> None:
        self._store.dispatch(SetApiKey(api_key))
        if self._gateway is not None:
            self._gateway.set_api_key(api_key)

    def is_api_key_set(self) -> bool:
        return bool(self._store.state.settings.api_key.strip())

    def update_settings(self, **updates: Any) -> Settings:
        """Shallow-merge fields into the settings, e.g. ``model="gpt-4o"``.

        Raises:
            ValueError: Unknown provider id or a field out of range
                (pydantic ``ValidationError`` is a ``ValueError``)
        """
        unknown = sorted(set(updates) - set(Settings.model_fields))
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        provider_id = updates.get("provider")
        if provider_id is not None and get_provider(provider_id) is None:
            raise ValueError(f"Unknown provider: {provider_id}")
        validated = Settings.model_validate({**self._store.state.settings.model_dump(), **updates})
        self._store.dispatch(MergeSettings({key: getattr(validated, key) for key in updates}))
        return self._store.state.settings

    async def close(self) -> None:
        await self._pipeline.close()
