"""LaTeX delimiter handling: normalization, extraction and restoration."""

import itertools
import logging
import re
from typing import Optional

from mathstream.core.models import MathBlock, PatternRule
from mathstream.pipeline import MathEngine, MathOptions
from mathstream.pipeline.escape import escape_html

logger = logging.getLogger(__name__)

# block-level delimiters come first so a display block is never split into two
# inline matches
PATTERN_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        re.compile(r"```(?:latex|tex|math)\s*\r?\n([\s\S]*?)```", re.IGNORECASE),
        display_mode=True,
    ),
    PatternRule(re.compile(r"\$\$([\s\S]*?)\$\$"), display_mode=True),
    PatternRule(re.compile(r"(?:\\\\|\\)\[([\s\S]*?)(?:\\\\|\\)\]"), display_mode=True),
    PatternRule(re.compile(r"(?:\\\\|\\)\(([\s\S]*?)(?:\\\\|\\)\)"), display_mode=False),
    # some providers escape dollar delimiters as \$...\$
    PatternRule(re.compile(r"\\\$([^$\n]+?)\\\$"), display_mode=False),
    PatternRule(
        re.compile(r"(?<![\\$])\$(?!\$)([^$\n]+?)(?<!\\)\$"), display_mode=False
    ),
)

ESCAPED_DOLLAR_PATTERN = re.compile(r"\\\$([^$\n]+?)\\\$")
CODE_SPAN_PATTERN = re.compile(r"(```[\s\S]*?```|`[^`\n]*`)")
BARE_CALL_PATTERN = re.compile(r"\b([A-Za-z]\([^()\n]*\\[a-zA-Z]+[^()\n]*\))")
TAG_PATTERN = re.compile(r"<[^<>]*>")

_ESCAPED_DELIMITERS = (
    ("\\\\[", "\\["),
    ("\\\\]", "\\]"),
    ("\\\\(", "\\("),
    ("\\\\)", "\\)"),
)


def placeholder_for(index: int) -> str:
    """returns the placeholder token for the index-th extracted block."""
    # letters and digits only, so markdown and code highlighters keep it whole
    return f"MATHBLOCK{index}END"


def normalize_latex_delimiters(latex: str) -> str:
    """
    collapses double-escaped math delimiters to their canonical form.

    Only the four escaped delimiters are rewritten. A bare ``\\\\`` is left
    alone since it separates rows in matrix and array environments.

    Args:
        latex: raw LaTeX source of a single block

    Returns:
        LaTeX with ``\\\\[``, ``\\\\]``, ``\\\\(``, ``\\\\)`` single-escaped
    """
    if "\\" not in latex:
        return latex

    for escaped, canonical in _ESCAPED_DELIMITERS:
        latex = latex.replace(escaped, canonical)
    return latex


def extract_math_blocks(text: str) -> tuple[str, list[MathBlock]]:
    """
    replaces math spans with placeholders to protect them from markdown.

    Args:
        text: message text (after optional auto-wrapping)

    Returns:
        tuple of (text with placeholders, blocks in extraction order)
    """
    blocks: list[MathBlock] = []
    counter = itertools.count()

    for rule in PATTERN_RULES:

        def replacer(match: re.Match[str], rule: PatternRule = rule) -> str:
            placeholder = placeholder_for(next(counter))
            blocks.append(
                MathBlock(
                    placeholder=placeholder,
                    latex=match.group(1) or "",
                    display_mode=rule.display_mode,
                )
            )
            return placeholder

        text = rule.matcher.sub(replacer, text)

    return text, blocks


def auto_wrap_bare_latex(text: str) -> str:
    """
    adds dollar delimiters around undelimited call-like LaTeX such as ``f(\\alpha)``.

    Code spans and fences are left untouched. Best-effort: ordinary
    parenthetical prose containing a backslash command may be wrapped too.

    Args:
        text: raw message text

    Returns:
        text with bare LaTeX wrapped in ``$...$``
    """
    if "\\" not in text:
        return text

    segments = CODE_SPAN_PATTERN.split(text)
    return "".join(
        segment if not segment or segment.startswith("`") else _wrap_segment(segment)
        for segment in segments
    )


def _wrap_segment(segment: str) -> str:
    """wraps bare LaTeX in a single non-code segment."""
    out = ESCAPED_DOLLAR_PATTERN.sub(r"$\1$", segment)

    def wrap_if_safe(match: re.Match[str]) -> str:
        start, end = match.span()
        prev_char = out[start - 1] if start > 0 else ""
        next_char = out[end] if end < len(out) else ""
        if "$" in (prev_char, next_char):
            return match.group(0)
        return f"${match.group(0)}$"

    return BARE_CALL_PATTERN.sub(wrap_if_safe, out)


def render_latex_safe(
    raw_latex: Optional[str],
    display_mode: bool = False,
    engine: Optional[MathEngine] = None,
) -> str:
    """
    typesets a single block, falling back to its escaped source.

    Args:
        raw_latex: LaTeX source as extracted
        display_mode: True for display math
        engine: math engine (None renders the escaped source)

    Returns:
        rendered math markup, or escaped source on failure
    """
    raw = raw_latex or ""
    if engine is None:
        return escape_html(raw)

    latex = normalize_latex_delimiters(raw.strip())
    options = MathOptions(
        display_mode=display_mode, throw_on_error=False, strict=False, trust=False
    )
    try:
        return engine.render_to_string(latex, options)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Math render failed for %r: %s", latex[:50], e)
        return f'<span class="math-error">{escape_html(raw)}</span>'


def restore_math_blocks(
    html: str, blocks: list[MathBlock], engine: Optional[MathEngine] = None
) -> str:
    """
    replaces placeholders in rendered HTML with typeset math.

    A placeholder the markdown pass split across tags (e.g. by a code
    highlighter) is located with tags allowed between its characters.

    Args:
        html: markdown output containing placeholders
        blocks: blocks from extract_math_blocks, in extraction order
        engine: math engine (None renders escaped sources)

    Returns:
        HTML with every recoverable placeholder resolved
    """
    unresolved = 0
    for block in blocks:
        rendered = render_latex_safe(block.latex, block.display_mode, engine)
        if block.placeholder in html:
            html = html.replace(block.placeholder, rendered, 1)
            continue

        split_pattern = _split_placeholder_pattern(block.placeholder)

        def keep_tags(match: re.Match[str], rendered: str = rendered) -> str:
            # tags crossed by the placeholder are kept so the markup stays balanced
            return rendered + "".join(TAG_PATTERN.findall(match.group(0)))

        html, count = split_pattern.subn(keep_tags, html, count=1)
        if not count:
            unresolved += 1
            logger.warning(
                "Placeholder %s missing from markdown output", block.placeholder
            )

    if unresolved:
        logger.warning("%d of %d math block(s) unresolved", unresolved, len(blocks))
    return html


def _split_placeholder_pattern(placeholder: str) -> re.Pattern[str]:
    """matches the placeholder with markup tags between any of its characters."""
    separator = f"(?:{TAG_PATTERN.pattern})*"
    return re.compile(separator.join(re.escape(char) for char in placeholder))
