"""Parser for saved chat session JSON."""

import re
import uuid
from datetime import datetime, timezone
from typing import Any

from mathstream.core.models import Session, SessionMessage

MAX_TITLE_LENGTH = 64


def process_session(json_data: dict[str, Any]) -> Session:
    """
    Process a saved chat session into a Session.

    Args:
        json_data: raw session JSON

    Returns:
        normalized Session object
    """
    raw_messages = json_data.get("messages")
    messages = [
        _normalize_message(m)
        for m in (raw_messages if isinstance(raw_messages, list) else [])
        if isinstance(m, dict)
    ]

    title = _safe_text(json_data.get("title")).strip() or generate_title(messages)

    return Session(
        id=_safe_text(json_data.get("id")) or uuid.uuid4().hex,
        title=title,
        created_at=normalize_timestamp(json_data.get("createdAt")),
        updated_at=normalize_timestamp(json_data.get("updatedAt")),
        provider=_safe_text(json_data.get("provider")),
        messages=messages,
    )


def generate_title(messages: list[SessionMessage]) -> str:
    """derives a title from the first non-blank user message."""
    if not messages:
        return "New Chat"

    first_user = next(
        (m for m in messages if m.type == "user" and m.text.strip()), None
    )
    base = (first_user.text if first_user else messages[0].text) or "New Chat"

    # collapses whitespace and clamps length
    normalized = re.sub(r"\s+", " ", base.strip())
    if len(normalized) <= MAX_TITLE_LENGTH:
        return normalized
    return normalized[: MAX_TITLE_LENGTH - 1].rstrip() + "…"


def normalize_timestamp(value: Any) -> str:
    """returns value as an ISO-8601 timestamp, or now if unparseable."""
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc).isoformat()
        except ValueError:
            pass
    return datetime.now(timezone.utc).isoformat()


def _normalize_message(message: dict[str, Any]) -> SessionMessage:
    """normalizes a single message dict."""
    message_type = "ai" if message.get("type") == "ai" else "user"
    return SessionMessage(
        id=_safe_text(message.get("id")) or uuid.uuid4().hex,
        type=message_type,
        text=_safe_text(message.get("text")),
        has_screenshot=bool(message.get("hasScreenshot")),
        timestamp=normalize_timestamp(message.get("timestamp")),
    )


def _safe_text(value: Any) -> str:
    return value if isinstance(value, str) else ""
