"""Request pipeline: settings plus history in, reply text out.

The pipeline owns the provider client built from the active settings and
turns every provider failure into a ``ChatError``. It sends each request
exactly once.
"""

import httpx
import openai
import structlog

from ..chat.models import Message, Settings
from .base import LLMProvider
from .errors import EmptyResponse, ProviderNotConfigured, normalize_error
from .factory import create_llm_provider
from .models import ChatMessage

logger = structlog.get_logger(__name__)


def to_wire_messages(history: list[Message]) -> list[ChatMessage]:
    """Project chat messages onto the wire schema (role and content only)."""
    return [ChatMessage(role=msg.role.value, content=msg.content) for msg in history]


class RequestPipeline:
    """Completion client that follows the active settings.

    ``configure`` rebuilds the client; without a usable credential the
    pipeline is uninitialized and ``send`` fails fast with
    ``ProviderNotConfigured`` before any network I/O.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the pipeline.

        Args:
            settings: Initial settings; the pipeline stays uninitialized if None
            http_client: HTTP client shared by every provider the pipeline
                builds. When omitted the pipeline creates and owns one.
        """
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._provider: LLMProvider | None = None
        self._settings: Settings | None = None
        self._not_configured: ProviderNotConfigured = ProviderNotConfigured()
        if settings is not None:
            self.configure(settings)

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> LLMProvider | None:
        return self._provider

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = openai.DefaultAsyncHttpxClient()
        return self._http_client

    def configure(self, settings: Settings) -> None:
        """Rebuild the provider client from settings.

        Idempotent: reapplying the currently configured settings is a no-op.
        """
        if settings == self._settings:
            return
        self._settings = settings

        if not settings.api_key.strip():
            self._provider = None
            self._not_configured = ProviderNotConfigured()
            logger.debug("pipeline_uninitialized", reason="missing_api_key")
            return

        try:
            self._provider = create_llm_provider(settings, http_client=self._client())
        except ProviderNotConfigured as exc:
            self._provider = None
            self._not_configured = exc
            logger.warning("pipeline_uninitialized", provider=settings.provider, reason=str(exc))
            return

        logger.debug("pipeline_configured", provider=settings.provider, model=settings.model)

    async def send(self, history: list[Message], settings: Settings) -> str:
        """Send the conversation history and return the reply text.

        Args:
            history: Messages in chat order, ending with the new user message
            settings: Settings to send with; re-applied before sending

        Returns:
            Text of the first completion choice

        Raises:
            ProviderNotConfigured: No credential or unresolvable provider
            EmptyResponse: The provider returned no text or an unreadable body
            ChatError: Any other normalized provider failure
        """
        self.configure(settings)
        if self._provider is None:
            raise ProviderNotConfigured(str(self._not_configured))

        try:
            response = await self._provider.chat_completion(
                to_wire_messages(history),
                model=settings.model,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            )
        except openai.APIError as exc:
            error = normalize_error(exc)
            logger.warning(
                "completion_failed",
                provider=settings.provider,
                model=settings.model,
                error_type=type(error).__name__,
                detail=str(error),
            )
            raise error from exc
        except ValueError as exc:
            # Unparseable body on a success status
            logger.warning(
                "completion_malformed",
                provider=settings.provider,
                model=settings.model,
                error=str(exc),
            )
            raise EmptyResponse() from exc

        if not response.content:
            logger.warning("completion_empty", provider=settings.provider, model=settings.model)
            raise EmptyResponse()

        logger.info(
            "completion_received",
            provider=settings.provider,
            model=response.model,
            usage=response.usage,
        )
        return response.content

    async def close(self) -> None:
        """Release the HTTP client if the pipeline created it."""
        self._provider = None
        self._settings = None
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
