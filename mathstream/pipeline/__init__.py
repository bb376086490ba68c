"""collaborator protocols and shared option types for the render pipeline."""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol

HighlightCallback = Callable[[str, Optional[str]], str]


@dataclass(frozen=True)
class MathOptions:
    """options passed to the math engine for a single expression."""

    display_mode: bool = False
    throw_on_error: bool = False
    strict: bool = False
    trust: bool = False


@dataclass(frozen=True)
class HighlightResult:
    """highlighted markup returned by a syntax highlighter."""

    value: str
    language: Optional[str] = None


@dataclass(frozen=True)
class MarkdownOptions:
    """one-time markdown renderer configuration."""

    highlight: Optional[HighlightCallback] = None
    breaks: bool = True
    allow_html: bool = True


class MarkdownRenderer(Protocol):
    """protocol for markdown renderers."""

    def configure(self, options: MarkdownOptions) -> None:
        """applies configuration; repeated calls are no-ops."""

    def parse(self, text: str) -> str:
        """renders markdown text to HTML."""


class MathEngine(Protocol):  # pylint: disable=too-few-public-methods
    """protocol for math typesetting engines."""

    def render_to_string(self, latex: str, options: MathOptions) -> str:
        """typesets LaTeX source to markup."""


class SyntaxHighlighter(Protocol):
    """protocol for code syntax highlighters."""

    def get_language(self, name: str) -> bool:
        """returns True if the highlighter knows the language."""

    def highlight(self, code: str, language: str) -> HighlightResult:
        """highlights code in the given language."""

    def highlight_auto(self, code: str) -> HighlightResult:
        """highlights code with automatic language detection."""


class Sanitizer(Protocol):  # pylint: disable=too-few-public-methods
    """protocol for HTML sanitizers."""

    def sanitize(
        self,
        html: str,
        extra_tags: Iterable[str] = (),
        extra_attributes: Iterable[str] = (),
    ) -> str:
        """strips disallowed markup from HTML."""
