"""message rendering: markdown with math, highlighted code and sanitized output."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from mathstream.pipeline import (
    MarkdownOptions,
    MarkdownRenderer,
    MathEngine,
    Sanitizer,
    SyntaxHighlighter,
)
from mathstream.pipeline.escape import escape_html
from mathstream.pipeline.highlight import PygmentsHighlighter, highlight_code_safe
from mathstream.pipeline.latex import (
    auto_wrap_bare_latex,
    extract_math_blocks,
    restore_math_blocks,
)
from mathstream.pipeline.markdown import MarkdownItRenderer
from mathstream.pipeline.mathml import LatexMathEngine
from mathstream.pipeline.sanitize import (
    MATHML_ATTRIBUTES,
    MATHML_TAGS,
    BleachSanitizer,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """
    collaborators and flags shared by every render call.

    Built once by the owning application. Any collaborator may be None, in
    which case its stage degrades to escaped output.
    """

    markdown: Optional[MarkdownRenderer] = None
    math_engine: Optional[MathEngine] = None
    highlighter: Optional[SyntaxHighlighter] = None
    sanitizer: Optional[Sanitizer] = None
    auto_wrap: bool = True
    allow_unsanitized: bool = False

    @classmethod
    def default(cls, **flags: Any) -> "RenderConfig":
        """returns an initialized config with the library-backed collaborators."""
        config = cls(
            markdown=MarkdownItRenderer(),
            math_engine=LatexMathEngine(),
            highlighter=PygmentsHighlighter(),
            sanitizer=BleachSanitizer(),
            **flags,
        )
        config.initialize()
        return config

    def initialize(self) -> None:
        """configures the markdown renderer; safe to call more than once."""
        if self.markdown is None:
            return
        self.markdown.configure(MarkdownOptions(highlight=self.highlight_code))

    def highlight_code(self, code: str, language: Optional[str]) -> str:
        """highlight hook handed to the markdown renderer."""
        return highlight_code_safe(code, language, self.highlighter)


def render_message(text: Any, config: RenderConfig) -> str:
    """
    renders a (possibly partial) model reply to display-safe HTML.

    Runs auto-wrap, math extraction, markdown, math restoration and
    sanitization. Called for every streamed chunk with the whole text so far,
    and once more when the stream ends. Never raises.

    Args:
        text: accumulated message text (non-strings render as empty)
        config: initialized render configuration

    Returns:
        sanitized HTML
    """
    if not isinstance(text, str):
        return ""

    try:
        preprocessed = auto_wrap_bare_latex(text) if config.auto_wrap else text
        protected, blocks = extract_math_blocks(preprocessed)
        html = _markdown_pass(protected, config.markdown)
        html = restore_math_blocks(html, blocks, config.math_engine)
        return _sanitize_pass(html, text, config)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Render failed, falling back to escaped text: %s", e)
        return escape_html(text)


def _markdown_pass(text: str, markdown: Optional[MarkdownRenderer]) -> str:
    """renders markdown, degrading to escaped text."""
    if markdown is None:
        return escape_html(text)
    try:
        return markdown.parse(text)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Markdown pass failed: %s", e)
        return escape_html(text)


def _sanitize_pass(html: str, original: str, config: RenderConfig) -> str:
    """sanitizes HTML while keeping math markup."""
    if config.sanitizer is None:
        if config.allow_unsanitized:
            logger.warning("No sanitizer configured, returning unsanitized HTML")
            return html
        return escape_html(original)

    return config.sanitizer.sanitize(
        html, extra_tags=MATHML_TAGS, extra_attributes=MATHML_ATTRIBUTES
    )
