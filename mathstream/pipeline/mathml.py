"""LaTeX to MathML typesetting backed by latex2mathml."""

import logging

from latex2mathml.converter import convert as latex_to_mathml

from mathstream.pipeline import MathOptions
from mathstream.pipeline.escape import escape_html

logger = logging.getLogger(__name__)


class MathRenderError(ValueError):
    """raised when an expression cannot be typeset and throw_on_error is set."""


class LatexMathEngine:  # pylint: disable=too-few-public-methods
    """typesets LaTeX to MathML markup."""

    def render_to_string(self, latex: str, options: MathOptions) -> str:
        """
        typesets LaTeX source to a MathML string.

        Args:
            latex: LaTeX source without delimiters
            options: display mode and error handling flags

        Returns:
            MathML markup, or an error span with the escaped source when
            conversion fails and throw_on_error is False

        Raises:
            ValueError: if trust is requested
            MathRenderError: if conversion fails and throw_on_error is True
        """
        if options.trust:
            raise ValueError("trusted rendering is not supported")

        try:
            if options.strict and not latex.isascii():
                raise MathRenderError("non-ASCII character in math mode")
            display = "block" if options.display_mode else "inline"
            return str(latex_to_mathml(latex, display=display))
        except Exception as e:  # pylint: disable=broad-exception-caught
            if options.throw_on_error:
                if isinstance(e, MathRenderError):
                    raise
                raise MathRenderError(str(e)) from e
            logger.debug("Rendering %r as error span: %s", latex[:50], e)
            return (
                f'<span class="math-error" title="{escape_html(str(e))}">'
                f"{escape_html(latex)}</span>"
            )
