"""markdown to HTML conversion backed by markdown-it-py."""

import logging
import threading
from typing import Any, Optional, cast

from markdown_it import MarkdownIt

from mathstream.pipeline import HighlightCallback, MarkdownOptions

logger = logging.getLogger(__name__)


class MarkdownItRenderer:
    """GFM-flavoured markdown renderer with a code highlight hook."""

    def __init__(self) -> None:
        self._md: Optional[MarkdownIt] = None
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        """True once configure has run."""
        return self._md is not None

    def configure(self, options: MarkdownOptions) -> None:
        """
        builds the parser; only the first call takes effect.

        Args:
            options: highlight callback and parser flags
        """
        with self._lock:
            if self._md is not None:
                return

            md_options: dict[str, Any] = {
                "breaks": options.breaks,
                "html": options.allow_html,
            }
            if options.highlight is not None:
                md_options["highlight"] = _fence_highlighter(options.highlight)

            md = MarkdownIt("commonmark", md_options)
            md.enable(["table", "strikethrough"])
            if not options.allow_html:
                md.disable(["html_inline", "html_block"])

            self._md = md
            logger.debug("Configured markdown renderer (html=%s)", options.allow_html)

    def parse(self, text: str) -> str:
        """
        renders markdown text to HTML.

        Raises:
            RuntimeError: if configure has not been called
        """
        if self._md is None:
            raise RuntimeError("markdown renderer is not configured")
        return cast(str, self._md.render(text))


def _fence_highlighter(hook: HighlightCallback) -> Any:
    """adapts a (code, language) hook to markdown-it's highlight signature."""

    def highlight(code: str, lang_name: str, _lang_attrs: str) -> str:
        highlighted = hook(code, lang_name or None)
        # unmodified code falls back to markdown-it's own escaping
        if highlighted == code:
            return ""
        return highlighted

    return highlight
