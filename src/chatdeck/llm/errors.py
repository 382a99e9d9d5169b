"""Error taxonomy for provider calls.

Every failure of a completion request is reported as exactly one of the
``ChatError`` subclasses below. ``str(error)`` is the text shown to the
user.
"""

from typing import Any

import openai


class ChatError(Exception):
    """Base class for all request pipeline failures."""

    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ProviderNotConfigured(ChatError):
    """No credential is set, or the provider cannot be resolved."""

    default_message = "API client not initialized. Please set an API key."


class MalformedRequest(ChatError):
    """The provider rejected the request as invalid."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid request: {detail}")


class InvalidCredential(ChatError):
    default_message = "Invalid API key. Please check your API key."


class QuotaExceeded(ChatError):
    default_message = "API quota exceeded. Please check your account balance."


class NetworkUnavailable(ChatError):
    default_message = "Network error. Please check your internet connection."


class EmptyResponse(ChatError):
    default_message = "No response received from the API"


class UnknownProviderError(ChatError):
    """Any provider failure that does not fit another category."""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(detail)


QUOTA_MARKERS = {"insufficient_quota", "insufficient_credits", "billing_hard_limit_reached"}


def _error_detail(exc: openai.APIError) -> str:
    """Prefer the provider's own message over the SDK's formatted one."""
    body: Any = exc.body
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return exc.message


def normalize_error(exc: openai.APIError) -> ChatError:
    """Map an OpenAI SDK exception onto the chat error taxonomy.

    Args:
        exc: Exception raised by ``AsyncOpenAI``

    Returns:
        The matching ``ChatError``; never raises
    """
    if isinstance(exc, openai.APIConnectionError):
        # Also covers APITimeoutError
        return NetworkUnavailable()

    error_type = getattr(exc, "type", None)
    error_code = getattr(exc, "code", None)
    status = getattr(exc, "status_code", None)

    if status == 402 or error_type in QUOTA_MARKERS or error_code in QUOTA_MARKERS:
        return QuotaExceeded()

    if status == 401 or error_type == "authentication_error":
        return InvalidCredential()

    if status == 400 or error_type == "invalid_request_error":
        return MalformedRequest(_error_detail(exc))

    return UnknownProviderError(_error_detail(exc))
