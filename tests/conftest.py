"""Pytest configuration and shared fixtures."""
import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import structlog

from chatdeck.chat.models import Chat, Message, Role, Settings
from chatdeck.chat.session import ChatSession
from chatdeck.llm import RequestPipeline
from chatdeck.storage import PersistenceGateway, create_store

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

OPENAI_KEY = "sk-test-abcdefghijklmnop"


def completion_payload(content: str | None, model: str = "gpt-4o-mini") -> dict:
    """Body of a successful chat-completions response."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1714564800,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21},
    }


def error_payload(message: str, error_type: str, code: str | None = None) -> dict:
    return {"error": {"message": message, "type": error_type, "code": code}}


class FakeTransport:
    """Mock HTTP transport that records every request it receives."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def _null_message_payload() -> dict:
    payload = completion_payload("unused")
    payload["choices"][0]["message"] = None
    return payload


# Success-status replies that carry no usable completion
MALFORMED_REPLIES = {
    "empty-json-body": lambda: httpx.Response(
        200, content=b"", headers={"content-type": "application/json"}
    ),
    "html-page": lambda: httpx.Response(
        200, content=b"<html><body>Bad gateway</body></html>", headers={"content-type": "text/html"}
    ),
    "null-message": lambda: httpx.Response(200, json=_null_message_payload()),
    "empty-object": lambda: httpx.Response(200, json={}),
}


def reply_with(content: str | None) -> FakeTransport:
    return FakeTransport(lambda request: httpx.Response(200, json=completion_payload(content)))


def make_message(content: str, role: Role = Role.USER, minutes: int = 0, id: str | None = None) -> Message:
    return Message(
        id=id or f"msg-{role.value}-{minutes}",
        content=content,
        role=role,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
    )


def make_chat(id: str, title: str = "New Chat", messages: list[Message] | None = None) -> Chat:
    return Chat(
        id=id,
        title=title,
        messages=messages or [],
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real provider configuration out of the tests."""
    for name in list(os.environ):
        if name.startswith(("OPENAI_", "CHATDECK_")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo logging setup done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def store():
    return create_store("memory")


@pytest.fixture
def gateway(store):
    return PersistenceGateway(store, namespace="test")


@pytest.fixture
def settings():
    return Settings(api_key=OPENAI_KEY, provider="openai", model="gpt-4o-mini")


@pytest.fixture
def transport():
    return reply_with("Hello from the model")


@pytest.fixture
def pipeline(transport):
    return RequestPipeline(http_client=transport.client())


@pytest.fixture
def session(gateway, pipeline, settings):
    """Session over in-memory storage with a configured credential."""
    gateway.set_api_key(settings.api_key)
    return ChatSession.open(gateway, pipeline)
