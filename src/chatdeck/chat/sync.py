"""Synchronization between conversation state, storage and the pipeline.

``StateStore`` owns the canonical state and notifies listeners after every
transition that changed it. ``PersistenceSync`` is the listener that
mirrors state into the persistence gateway and reconfigures the request
pipeline; it also rebuilds state from storage at startup.
"""

from collections.abc import Callable

import structlog
from pydantic import ValidationError

from ..llm.pipeline import RequestPipeline
from ..storage.gateway import PersistenceGateway
from .intents import Intent, MergeSettings, ReplaceAllChats, SetCurrentChat
from .models import Chat, ConversationState, Settings
from .reducer import reduce

logger = structlog.get_logger(__name__)

Listener = Callable[[ConversationState, ConversationState], None]


class StateStore:
    """Holder of the authoritative ``ConversationState``.

    ``dispatch`` is the only way to change state. Listeners run
    synchronously, in subscription order, after each change; a failing
    listener is logged and does not stop the others.
    """

    def __init__(self, initial: ConversationState | None = None):
        self._state = initial or ConversationState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, intent: Intent) -> ConversationState:
        """Apply an intent, notify listeners if the state changed."""
        previous = self._state
        current = reduce(previous, intent)
        if current == previous:
            return current

        self._state = current
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                logger.exception("state_listener_failed", intent=type(intent).__name__)
        return current


def restore_chats(raw_chats: list[dict]) -> list[Chat]:
    """Rebuild chats from stored JSON objects.

    Timestamps stored as text are parsed back into datetimes. Entries that
    fail validation are dropped, as are duplicate ids after the first.
    """
    chats: list[Chat] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_chats):
        try:
            chat = Chat.model_validate(raw)
        except ValidationError as exc:
            logger.warning("stored_chat_invalid", index=index, errors=exc.error_count())
            continue
        if chat.id in seen:
            logger.warning("stored_chat_duplicate", chat_id=chat.id)
            continue
        seen.add(chat.id)
        chats.append(chat)
    return chats


def restore_settings(stored: dict, api_key: str | None) -> Settings:
    """Merge stored settings over defaults; a stored credential wins."""
    merged = {**Settings.defaults().model_dump(), **stored}
    if api_key:
        merged["api_key"] = api_key
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        logger.warning("stored_settings_invalid", errors=exc.error_count())
        fallback = Settings.defaults()
        if api_key:
            fallback = fallback.model_copy(update={"api_key": api_key})
        return fallback


class PersistenceSync:
    """Mirror state changes into storage and the request pipeline."""

    def __init__(self, gateway: PersistenceGateway, pipeline: RequestPipeline):
        self._gateway = gateway
        self._pipeline = pipeline

    def hydrate(self, store: StateStore) -> ConversationState:
        """Load persisted chats and settings into the store.

        The current chat becomes the stored one if it still exists, else the
        first chat, else none.
        """
        settings = restore_settings(self._gateway.get_settings(), self._gateway.get_api_key())
        store.dispatch(MergeSettings(settings.model_dump()))
        # Pipeline follows settings even if the merge left state unchanged
        self._pipeline.configure(store.state.settings)

        chats = restore_chats(self._gateway.get_chats())
        if chats:
            store.dispatch(ReplaceAllChats(chats))
            stored_id = self._gateway.get_current_chat_id()
            if stored_id and any(chat.id == stored_id for chat in chats):
                store.dispatch(SetCurrentChat(stored_id))
            else:
                store.dispatch(SetCurrentChat(chats[0].id))

        logger.info(
            "state_hydrated",
            chats=len(chats),
            current_chat_id=store.state.current_chat_id,
            provider=store.state.settings.provider,
        )
        return store.state

    def __call__(self, previous: ConversationState, current: ConversationState) -> None:
        if current.chats != previous.chats and current.chats:
            self._gateway.save_chats(current.chats)

        if current.current_chat_id != previous.current_chat_id:
            self._gateway.save_current_chat_id(current.current_chat_id)

        if current.settings != previous.settings:
            self._gateway.set_settings(current.settings)
            self._pipeline.configure(current.settings)
