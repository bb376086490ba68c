"""code highlighting backed by Pygments."""

import logging
from typing import Optional

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

from mathstream.pipeline import HighlightResult, SyntaxHighlighter

logger = logging.getLogger(__name__)


class PygmentsHighlighter:
    """highlights code into class-annotated spans."""

    def __init__(self) -> None:
        # fence renderer supplies the <pre><code> wrapper
        self._formatter = HtmlFormatter(nowrap=True)

    def get_language(self, name: str) -> bool:
        """returns True if Pygments has a lexer for the language name."""
        try:
            get_lexer_by_name(name)
        except ClassNotFound:
            return False
        return True

    def highlight(self, code: str, language: str) -> HighlightResult:
        """highlights code with the named lexer."""
        lexer = get_lexer_by_name(language)
        return HighlightResult(
            value=pygments_highlight(code, lexer, self._formatter), language=language
        )

    def highlight_auto(self, code: str) -> HighlightResult:
        """highlights code with a guessed lexer."""
        lexer = guess_lexer(code)
        return HighlightResult(
            value=pygments_highlight(code, lexer, self._formatter),
            language=lexer.aliases[0] if lexer.aliases else None,
        )

    def style_defs(self, selector: str = "pre code") -> str:
        """returns CSS rules for the highlight classes."""
        return str(HtmlFormatter().get_style_defs(selector))


def highlight_code_safe(
    code: str, language: Optional[str], highlighter: Optional[SyntaxHighlighter]
) -> str:
    """
    highlights a fenced code block without ever raising.

    Args:
        code: code block body
        language: fence info language, if any
        highlighter: highlighter collaborator (None returns code unmodified)

    Returns:
        highlighted markup, or code unmodified on any failure
    """
    if highlighter is None:
        return code

    try:
        known = bool(language) and highlighter.get_language(language or "")
    except Exception:  # pylint: disable=broad-exception-caught
        known = False

    if known and language:
        try:
            return highlighter.highlight(code, language).value
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.debug("Highlighting %s failed: %s", language, e)
            return code

    try:
        return highlighter.highlight_auto(code).value
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Language detection failed: %s", e)
        return code
