from typing import Any

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse


class OpenAICompatibleProvider(LLMProvider):
    """LLM provider for any endpoint speaking the OpenAI chat-completions API.

    Hidden design decisions:
    - API client initialization (via OpenAI SDK)
    - Message format conversion
    - Authentication mechanism (bearer key plus optional fixed headers)
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: Bearer credential for the endpoint
            model: Default model to use
            base_url: API base URL; requests go to ``{base_url}/chat/completions``
            default_headers: Extra headers sent with every request
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._base_url = base_url
        self._default_headers = dict(default_headers or {})
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            default_headers=self._default_headers or None,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional endpoint-specific parameters

        Returns:
            LLMResponse with generated content ('' if the endpoint sent none)
        """
        model_to_use = model or self._model

        wire_messages = [
            {"role": msg.role, "content": msg.content}
            for msg in messages
        ]

        # Build request params, only including max_tokens if set
        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": wire_messages,
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens

        completion = await self._client.chat.completions.create(**request_params)
        if not isinstance(completion, ChatCompletion):
            # Non-JSON body, e.g. an HTML page from a proxy
            return LLMResponse(content="", model=model_to_use)

        # Fields may be missing or null; the SDK does not validate bodies
        usage = None
        completion_usage = getattr(completion, "usage", None)
        if completion_usage is not None:
            usage = {
                "prompt_tokens": completion_usage.prompt_tokens,
                "completion_tokens": completion_usage.completion_tokens,
                "total_tokens": completion_usage.total_tokens
            }

        content = None
        choices = getattr(completion, "choices", None)
        if choices:
            message = getattr(choices[0], "message", None)
            if message is not None:
                content = getattr(message, "content", None)

        return LLMResponse(
            content=content if isinstance(content, str) else "",
            model=getattr(completion, "model", None) or model_to_use,
            usage=usage
        )
