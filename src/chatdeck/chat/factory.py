"""Construction of well-formed chat entities.

Every identifier and timestamp used by the reducer is materialized here,
so the reducer itself stays free of clock reads and randomness.
"""

import re
from datetime import datetime, timezone

from uuid_extensions import uuid7

from .models import NEW_CHAT_TITLE, Chat, Message, Role

TITLE_MAX_LENGTH = 50
TITLE_ELLIPSIS = "..."

_NEWLINES = re.compile(r"\r?\n")


def generate_id() -> str:
    """Generate a time-ordered identifier (millisecond prefix, random suffix)."""
    return str(uuid7())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_message(content: str, role: Role) -> Message:
    """Create a message with a fresh id and timestamp.

    Content is trimmed. Rejecting empty content is the caller's job.
    """
    return Message(
        id=generate_id(),
        content=content.strip(),
        role=role,
        timestamp=utc_now(),
    )


def new_chat(title: str | None = None) -> Chat:
    """Create an empty chat, titled with the sentinel unless a title is given."""
    now = utc_now()
    return Chat(
        id=generate_id(),
        title=title or NEW_CHAT_TITLE,
        messages=[],
        created_at=now,
        updated_at=now,
    )


def derive_title(first_message: str) -> str:
    """Derive a single-line chat title from the first user message.

    Args:
        first_message: Raw message text

    Returns:
        The collapsed text, cut to 50 characters plus an ellipsis if longer
    """
    cleaned = _NEWLINES.sub(" ", first_message.strip())
    if len(cleaned) <= TITLE_MAX_LENGTH:
        return cleaned
    return cleaned[:TITLE_MAX_LENGTH].rstrip() + TITLE_ELLIPSIS
