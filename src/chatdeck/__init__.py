"""
chatdeck: a multi-chat client for OpenAI-compatible LLM providers.

Conversation state is a pure reducer over explicit intents; a session
facade persists it to local storage and drives the provider pipeline.
"""

__version__ = "0.1.0"

from .chat import Chat, ConversationState, Message, Role, Settings
from .chat.session import ChatSession
from .llm import ChatError, RequestPipeline
from .providers import ProviderConfig, get_provider, validate_credential
from .storage import PersistenceGateway, create_store

__all__ = [
    "Chat",
    "ChatError",
    "ChatSession",
    "ConversationState",
    "Message",
    "PersistenceGateway",
    "ProviderConfig",
    "RequestPipeline",
    "Role",
    "Settings",
    "create_store",
    "get_provider",
    "validate_credential",
]
