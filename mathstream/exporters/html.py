"""HTML exporter for saved chat sessions."""

import logging
import re
from pathlib import Path

from mathstream.core.models import Session, SessionMessage
from mathstream.exporters.base import Exporter
from mathstream.pipeline.escape import escape_html
from mathstream.pipeline.highlight import PygmentsHighlighter
from mathstream.render import RenderConfig, render_message

logger = logging.getLogger(__name__)

BASE_CSS = """
body { font-family: -apple-system, "Segoe UI", sans-serif; max-width: 48em; margin: 2em auto; }
.message { margin: 1.5em 0; }
.author { font-weight: bold; color: #555; }
.math-error { color: #c00; font-family: monospace; }
pre { background: #f6f8fa; padding: 0.75em; overflow-x: auto; }
math[display="block"] { display: block; margin: 0.75em 0; }
"""


class HTMLExporter(Exporter):  # pylint: disable=too-few-public-methods
    """exports sessions to standalone HTML files."""

    def __init__(self, config: RenderConfig) -> None:
        self.config = config
        # file name -> id of the session that claimed it
        self._claimed: dict[str, str] = {}

    def export(
        self,
        session: Session,
        destination: str,
        dry_run: bool = False,
        overwrite: bool = False,
    ) -> None:
        """exports session to an HTML file named after its title."""
        output_path = Path(destination) / self._filename_for(session)

        if dry_run:
            logger.info("Would write to: %s", output_path)
            return

        if output_path.exists() and not overwrite:
            logger.info("Skipping existing file: %s", output_path)
            return

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render_document(session), encoding="utf-8")
        logger.debug("Wrote %s", output_path)

    def render_document(self, session: Session) -> str:
        """renders the session as a complete HTML document."""
        title_escaped = escape_html(session.title)
        messages_html = "".join(self._render_message(m) for m in session.messages)

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{title_escaped}</title>
    <style>{BASE_CSS}{self._code_css()}</style>
</head>
<body>
    <h1>{title_escaped}</h1>
    {messages_html}
</body>
</html>"""

    def _render_message(self, message: SessionMessage) -> str:
        """renders one message; only AI replies go through markdown."""
        if message.type == "ai":
            author_label = "Assistant"
            content = render_message(message.text, self.config)
        else:
            author_label = "You"
            lines = escape_html(message.text).split("\n")
            content = "<p>" + "<br>\n".join(lines) + "</p>"

        return f"""
    <div class="message {message.type}">
        <div class="author">{author_label}</div>
        <div class="content">{content}</div>
    </div>"""

    def _filename_for(self, session: Session) -> str:
        """returns the session's file name, adding an id suffix on title clashes."""
        filename = session_filename(session)
        owner = self._claimed.setdefault(filename, session.id)
        if owner != session.id:
            filename = session_filename(session, with_id=True)
            self._claimed.setdefault(filename, session.id)
        return filename

    def _code_css(self) -> str:
        highlighter = self.config.highlighter
        if isinstance(highlighter, PygmentsHighlighter):
            return highlighter.style_defs("pre code")
        return ""


def session_filename(session: Session, with_id: bool = False) -> str:
    """
    returns a filesystem-safe file name for the session.

    Args:
        session: session to name
        with_id: if True, append a short id suffix to tell same-titled sessions apart

    Returns:
        file name ending in .html
    """
    safe_id = re.sub(r"[^\w-]", "", session.id)
    safe_title = re.sub(r"[^\w\s-]", "", session.title)
    safe_title = re.sub(r"[-\s]+", "_", safe_title).strip("_")
    if not safe_title:
        return f"Session-{safe_id or 'untitled'}.html"
    if with_id and safe_id:
        return f"Session-{safe_title}-{safe_id[:8]}.html"
    return f"Session-{safe_title}.html"
