"""Unit tests for the request pipeline and error normalization."""
import json

import httpx
import pytest

from chatdeck.chat.models import Role, Settings
from chatdeck.llm import (
    EmptyResponse,
    InvalidCredential,
    LLMProvider,
    LLMResponse,
    MalformedRequest,
    NetworkUnavailable,
    OpenAICompatibleProvider,
    ProviderNotConfigured,
    QuotaExceeded,
    RequestPipeline,
    UnknownProviderError,
    create_llm_provider,
    resolve_endpoint,
)

from .conftest import (
    MALFORMED_REPLIES,
    OPENAI_KEY,
    FakeTransport,
    completion_payload,
    error_payload,
    make_message,
    reply_with,
)

HISTORY = [
    make_message("What is 2 + 2?", Role.USER, minutes=0),
    make_message("4", Role.ASSISTANT, minutes=1),
    make_message("And times 3?", Role.USER, minutes=2),
]


def failing_with(status: int, body: dict) -> FakeTransport:
    return FakeTransport(lambda request: httpx.Response(status, json=body))


def raising(exc: Exception) -> FakeTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return FakeTransport(handler)


class TestLLMProviderInterface:
    def test_provider_is_abstract(self):
        """Test that LLMProvider cannot be instantiated directly."""
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore

    def test_only_chat_completion_is_required(self):
        """Test that a subclass needs nothing but chat_completion."""
        class Echo(LLMProvider):
            async def chat_completion(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
                return LLMResponse(content=messages[-1].content, model=model or "echo")

        assert isinstance(Echo(), LLMProvider)


class TestResolveEndpoint:
    """Tests for per-provider endpoint wiring."""

    def test_default_base_url(self):
        base_url, headers = resolve_endpoint(Settings(provider="openrouter"))
        assert base_url == "https://openrouter.ai/api/v1"
        assert headers == {}

    def test_override_base_url(self):
        base_url, _ = resolve_endpoint(Settings(provider="custom", base_url="http://localhost:8080/v1/"))
        assert base_url == "http://localhost:8080/v1"

    def test_anthropic_suffix_and_version_header(self):
        base_url, headers = resolve_endpoint(Settings(provider="anthropic"))
        assert base_url == "https://api.anthropic.com/v1"
        assert headers == {"anthropic-version": "2023-06-01"}

    def test_anthropic_suffix_not_doubled(self):
        base_url, _ = resolve_endpoint(Settings(provider="anthropic", base_url="https://proxy.example/v1"))
        assert base_url == "https://proxy.example/v1"

    def test_unknown_provider(self):
        with pytest.raises(ProviderNotConfigured, match="Unknown provider"):
            resolve_endpoint(Settings(provider="nope"))

    def test_custom_without_url(self):
        with pytest.raises(ProviderNotConfigured, match="base URL"):
            resolve_endpoint(Settings(provider="custom"))


class TestCreateLLMProvider:
    def test_creates_openai_compatible_provider(self):
        provider = create_llm_provider(Settings(api_key=OPENAI_KEY, model="gpt-4o"))

        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider.model == "gpt-4o"
        assert provider.base_url == "https://api.openai.com/v1"

    def test_missing_api_key(self):
        with pytest.raises(ProviderNotConfigured):
            create_llm_provider(Settings(api_key="  "))


class TestRequestPipelineSend:
    """Tests for successful sends."""

    @pytest.mark.asyncio
    async def test_returns_first_choice_text(self, settings):
        transport = reply_with("It is 12.")
        pipeline = RequestPipeline(http_client=transport.client())

        reply = await pipeline.send(HISTORY, settings)

        assert reply == "It is 12."
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_wire_request(self, settings):
        """Test URL, bearer header and body of the outgoing request."""
        transport = reply_with("ok")
        pipeline = RequestPipeline(http_client=transport.client())
        settings = settings.model_copy(update={"temperature": 0.3, "max_tokens": 256})

        await pipeline.send(HISTORY, settings)

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["authorization"] == f"Bearer {OPENAI_KEY}"
        body = json.loads(request.content)
        assert body == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "user", "content": "What is 2 + 2?"},
                {"role": "assistant", "content": "4"},
                {"role": "user", "content": "And times 3?"},
            ],
            "temperature": 0.3,
            "max_tokens": 256,
        }

    @pytest.mark.asyncio
    async def test_anthropic_request(self):
        transport = reply_with("Bonjour")
        pipeline = RequestPipeline(http_client=transport.client())
        settings = Settings(
            api_key="sk-ant-abcdefghijklmnop",
            provider="anthropic",
            model="claude-3-5-haiku-20241022",
        )

        await pipeline.send(HISTORY, settings)

        request = transport.requests[0]
        assert str(request.url) == "https://api.anthropic.com/v1/chat/completions"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert json.loads(request.content)["model"] == "claude-3-5-haiku-20241022"

    @pytest.mark.asyncio
    async def test_send_reconfigures_from_settings(self, settings):
        """Test that send follows the settings it is given."""
        transport = reply_with("ok")
        pipeline = RequestPipeline(http_client=transport.client())
        pipeline.configure(settings)

        other = Settings(api_key="sk-or-v1-abcdefghijklmnop", provider="openrouter", model="openai/gpt-4o")
        await pipeline.send(HISTORY, other)

        assert str(transport.requests[0].url) == "https://openrouter.ai/api/v1/chat/completions"

    def test_configure_is_idempotent(self, settings):
        pipeline = RequestPipeline(http_client=reply_with("ok").client())
        pipeline.configure(settings)
        provider = pipeline.provider
        pipeline.configure(settings.model_copy())

        assert pipeline.provider is provider


class TestRequestPipelineNotConfigured:
    """Tests for the uninitialized pipeline."""

    @pytest.mark.asyncio
    async def test_no_credential_fails_without_network(self):
        """Test that a pipeline without a key never touches the transport."""
        transport = reply_with("should not be sent")
        pipeline = RequestPipeline(http_client=transport.client())

        for _ in range(3):
            with pytest.raises(ProviderNotConfigured):
                await pipeline.send(HISTORY, Settings(api_key=""))

        assert not pipeline.is_initialized
        assert transport.calls == 0

    @pytest.mark.asyncio
    async def test_clearing_key_uninitializes(self, settings):
        transport = reply_with("ok")
        pipeline = RequestPipeline(settings, http_client=transport.client())
        assert pipeline.is_initialized

        pipeline.configure(settings.model_copy(update={"api_key": ""}))

        assert not pipeline.is_initialized
        with pytest.raises(ProviderNotConfigured):
            await pipeline.send(HISTORY, settings.model_copy(update={"api_key": ""}))
        assert transport.calls == 0

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        transport = reply_with("ok")
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(ProviderNotConfigured, match="Unknown provider: nope"):
            await pipeline.send(HISTORY, Settings(api_key="key-123", provider="nope"))
        assert transport.calls == 0


class TestErrorNormalization:
    """Tests that provider failures map onto the error taxonomy."""

    @pytest.mark.asyncio
    async def test_invalid_request(self, settings):
        transport = failing_with(400, error_payload("max_tokens is too large", "invalid_request_error"))
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(MalformedRequest) as excinfo:
            await pipeline.send(HISTORY, settings)

        assert excinfo.value.detail == "max_tokens is too large"
        assert str(excinfo.value) == "Invalid request: max_tokens is too large"

    @pytest.mark.asyncio
    async def test_authentication_failure(self, settings):
        transport = failing_with(401, error_payload("Incorrect API key provided", "authentication_error"))
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(InvalidCredential, match="Invalid API key"):
            await pipeline.send(HISTORY, settings)

    @pytest.mark.asyncio
    async def test_insufficient_quota(self, settings):
        body = error_payload("You exceeded your current quota", "insufficient_quota", "insufficient_quota")
        pipeline = RequestPipeline(http_client=failing_with(429, body).client())

        with pytest.raises(QuotaExceeded):
            await pipeline.send(HISTORY, settings)

    @pytest.mark.asyncio
    async def test_payment_required(self, settings):
        pipeline = RequestPipeline(
            http_client=failing_with(402, error_payload("Insufficient credits", "payment_required")).client()
        )

        with pytest.raises(QuotaExceeded):
            await pipeline.send(HISTORY, settings)

    @pytest.mark.asyncio
    async def test_connection_failure(self, settings):
        transport = raising(httpx.ConnectError("connection refused"))
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(NetworkUnavailable, match="Network error"):
            await pipeline.send(HISTORY, settings)
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        pipeline = RequestPipeline(http_client=raising(httpx.ReadTimeout("timed out")).client())

        with pytest.raises(NetworkUnavailable):
            await pipeline.send(HISTORY, settings)

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, settings):
        transport = failing_with(500, error_payload("upstream exploded", "server_error"))
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(UnknownProviderError) as excinfo:
            await pipeline.send(HISTORY, settings)

        assert excinfo.value.detail == "upstream exploded"
        assert transport.calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        completion_payload(None),
        completion_payload(""),
        {**completion_payload("x"), "choices": []},
    ])
    async def test_empty_completion(self, settings, payload):
        transport = FakeTransport(lambda request: httpx.Response(200, json=payload))
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(EmptyResponse, match="No response received"):
            await pipeline.send(HISTORY, settings)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", sorted(MALFORMED_REPLIES))
    async def test_malformed_body_is_empty_response(self, settings, kind):
        """Test that unreadable success replies surface as EmptyResponse."""
        transport = FakeTransport(lambda request: MALFORMED_REPLIES[kind]())
        pipeline = RequestPipeline(http_client=transport.client())

        with pytest.raises(EmptyResponse):
            await pipeline.send(HISTORY, settings)
        assert transport.calls == 1


class TestPipelineClose:
    @pytest.mark.asyncio
    async def test_close_keeps_injected_client_open(self, settings):
        client = reply_with("ok").client()
        pipeline = RequestPipeline(settings, http_client=client)

        await pipeline.close()

        assert not client.is_closed
        assert not pipeline.is_initialized
        await client.aclose()
