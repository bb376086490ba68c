"""tests for saved session parsing."""

from mathstream.core.models import SessionMessage
from mathstream.core.parser import generate_title, normalize_timestamp, process_session


def test_process_session_basic_fields() -> None:
    """parses id, title, provider and messages."""
    session = process_session(
        {
            "id": "abc",
            "title": "Physics",
            "provider": "openai",
            "createdAt": "2024-03-01T10:00:00Z",
            "updatedAt": "2024-03-01T11:00:00Z",
            "messages": [
                {"id": "1", "type": "user", "text": "hi", "hasScreenshot": True},
                {"id": "2", "type": "ai", "text": "$x$"},
            ],
        }
    )
    assert session.id == "abc"
    assert session.title == "Physics"
    assert session.provider == "openai"
    assert session.created_at == "2024-03-01T10:00:00+00:00"
    assert [m.type for m in session.messages] == ["user", "ai"]
    assert session.messages[0].has_screenshot is True


def test_unknown_message_type_becomes_user() -> None:
    """treats anything but 'ai' as a user message."""
    session = process_session({"messages": [{"type": "system", "text": "x"}]})
    assert session.messages[0].type == "user"


def test_non_string_text_becomes_empty() -> None:
    """replaces non-string message text with an empty string."""
    session = process_session({"messages": [{"type": "ai", "text": 42}]})
    assert session.messages[0].text == ""


def test_missing_ids_are_generated() -> None:
    """generates ids when they are missing."""
    session = process_session({"messages": [{"type": "ai", "text": "x"}]})
    assert session.id
    assert session.messages[0].id


def test_missing_title_uses_first_user_message() -> None:
    """derives the title from the first non-blank user message."""
    session = process_session(
        {
            "messages": [
                {"type": "ai", "text": "Hello"},
                {"type": "user", "text": "   "},
                {"type": "user", "text": "Solve\n  x^2 = 4"},
            ]
        }
    )
    assert session.title == "Solve x^2 = 4"


def test_generate_title_clamps_length() -> None:
    """clamps long titles with an ellipsis."""
    title = generate_title([SessionMessage(id="1", type="user", text="word " * 40)])
    assert len(title) <= 64
    assert title.endswith("…")


def test_generate_title_empty() -> None:
    """falls back to 'New Chat' without messages."""
    assert generate_title([]) == "New Chat"


def test_normalize_timestamp_invalid_uses_now() -> None:
    """returns a valid timestamp for unparseable input."""
    assert normalize_timestamp("yesterday-ish")
    assert normalize_timestamp(None)
