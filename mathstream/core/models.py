"""Data models for math extraction and saved chat sessions."""

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class MathBlock:
    """math span lifted out of message text before the markdown pass."""

    placeholder: str
    latex: str
    display_mode: bool


@dataclass(frozen=True)
class PatternRule:
    """delimiter pattern and the math mode its matches render in."""

    matcher: re.Pattern[str]
    display_mode: bool


@dataclass
class SessionMessage:
    """single message in a saved chat session."""

    id: str
    type: str  # "user" or "ai"
    text: str
    has_screenshot: bool = False
    timestamp: Optional[str] = None


@dataclass
class Session:
    """saved chat session."""

    id: str
    title: str
    created_at: str
    updated_at: str
    provider: str = ""
    messages: list[SessionMessage] = field(default_factory=list)
